"""
Job runner: identity, progress bookkeeping and lifecycle reporting.

A JobRunner is composed into every concrete job. It persists a job_run
record describing the job (status, progress, error) and a job_log trail of
everything the job logs through it. The job itself decides when to call
on_start(), on_update() and on_completed(); the runner only records.

Store writes are detached: lifecycle calls return immediately and the
writes run in issue order on a per-job queue. A failed write is logged and
never reaches the job. Invalid arguments, which point at a defect in the
job, are raised immediately.
"""

import logging
import math
import numbers
import traceback
import uuid
from collections.abc import Callable
from typing import Any

from jobtrack.core.jobs.exceptions import InvalidArgumentError
from jobtrack.core.jobs.types import JobStatus, status_value
from jobtrack.core.jobs.write_queue import JobWriteQueue
from jobtrack.core.storage.base import (
    JOB_LOG_COLLECTION,
    JOB_RUN_COLLECTION,
    BaseJobStore,
    FieldUpdate,
    id_where,
)
from jobtrack.core.utils.worker import get_worker_id

logger = logging.getLogger(__name__)

# Live sink for statements logged by jobs
job_logger = logging.getLogger("jobtrack.jobs")

ProgressListener = Callable[[float], Any]


def _default_job_id() -> str:
    return uuid.uuid4().hex


def _is_number(value: Any) -> bool:
    """True for finite real numbers. Booleans do not count."""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_chunk_of_work_percentage(value: Any) -> float:
    """
    Check a work-weight.

    Raises:
        InvalidArgumentError: If value is not a number in (0, 1].
    """
    if not _is_number(value) or value <= 0 or value > 1:
        raise InvalidArgumentError(
            "The chunk of work percentage must be a value between "
            f"0 (exclusive) and 1 (inclusive), got: {value!r}"
        )
    return value


def _format_message(message: str, args: tuple[Any, ...]) -> str:
    """
    Fill a %-style pattern from args.

    Args the pattern has no placeholder for are appended, space separated.
    """
    if not args:
        return message

    for used in range(len(args), -1, -1):
        try:
            text = message % args[:used]
        except (TypeError, ValueError):
            continue
        return " ".join([text, *(str(arg) for arg in args[used:])])
    return " ".join([message, *(str(arg) for arg in args)])


def format_error(error: BaseException | str) -> str:
    """Render an error as the detail string stored on the job record."""
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(error)).rstrip()
    return str(error)


class JobRunner:
    """
    Lifecycle reporter for one job instance.

    Usage:
        runner = JobRunner(store, "reindex")
        runner.on_start()
        runner.on_update(50)
        runner.log("indexed %d documents", 1200)
        runner.on_completed()
        await runner.flush()

    Args:
        store: Store receiving the job_run and job_log records.
        name: Human readable job name, defaults to the id.
        job_id: Externally assigned id, generated when empty.
        chunk_of_work_percentage: Share of a larger job this job accounts for.
        worker_id: Id of the emitting worker, defaults to get_worker_id().
        id_factory: Generator for ids when job_id is not supplied.
        sink: Logger receiving job statements, defaults to "jobtrack.jobs".
        write_queue_size: Bound on pending writes for this job, 0 for none.
    """

    def __init__(
        self,
        store: BaseJobStore,
        name: str | None = None,
        job_id: str | None = None,
        *,
        chunk_of_work_percentage: float | None = None,
        worker_id: str | None = None,
        id_factory: Callable[[], str] | None = None,
        sink: logging.Logger | None = None,
        write_queue_size: int = 0,
    ) -> None:
        self.store = store
        self._id = str(job_id) if job_id else str((id_factory or _default_job_id)())
        self.name = name if name else self._id
        self.worker_id = worker_id or get_worker_id()
        self.sink = sink or job_logger

        self._chunk_of_work_percentage: float = 1
        self._chunk_explicit = False
        if chunk_of_work_percentage is not None:
            self.set_chunk_of_work_percentage(chunk_of_work_percentage)

        self._writes = JobWriteQueue(f"JobRunner[{self._id}]", maxsize=write_queue_size)
        self._progress_listeners: list[ProgressListener] = []
        self._completed = False

    def __repr__(self) -> str:
        return f"<JobRunner(id='{self._id}', name='{self.name}')>"

    @property
    def id(self) -> str:
        return self._id

    def get_id(self) -> str:
        return self._id

    @property
    def completed(self) -> bool:
        """Whether on_completed() has been accepted."""
        return self._completed

    @property
    def pending_writes(self) -> int:
        return self._writes.pending

    def set_chunk_of_work_percentage(self, value: float) -> "JobRunner":
        """
        Set the share of an enclosing job's work this job accounts for.

        A job run on its own accounts for all of it (1). A job that is one
        of three equal children of a composite job accounts for a third.

        Raises:
            InvalidArgumentError: If value is not a number in (0, 1].
        """
        self._chunk_of_work_percentage = validate_chunk_of_work_percentage(value)
        self._chunk_explicit = True
        return self

    def get_chunk_of_work_percentage(self) -> float:
        return self._chunk_of_work_percentage

    @property
    def chunk_of_work_explicit(self) -> bool:
        """Whether the work-weight was set rather than left at its default."""
        return self._chunk_explicit

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """
        Register a callable notified with every accepted progress increment.

        Increments are passed unscaled; a composite job scales them by this
        runner's chunk of work percentage before reporting them as its own.
        """
        self._progress_listeners.append(listener)

    def log(self, message: str, *args: Any) -> None:
        """
        Log a statement to the live sink and persist it to job_log.

        The message is a %-style pattern filled from args, prefixed with
        the job name. Args without a placeholder are appended.
        """
        if not message:
            return

        text = f"{self.name}: {_format_message(message, args)}"
        self.sink.debug(text)

        statement = {
            "object_type": JOB_LOG_COLLECTION,
            "job_id": self._id,
            "worker_id": self.worker_id,
            "name": self.name,
            "message": text,
            "metadata": {},
        }
        self._writes.submit(
            "persist log statement",
            lambda: self.store.insert(JOB_LOG_COLLECTION, statement),
            level=logging.DEBUG,
        )

    def on_start(self, status: JobStatus | str = JobStatus.RUNNING) -> None:
        """
        Create or reset the job_run record with zero progress.

        A status that is not a non-empty string falls back to RUNNING.
        """
        status = status_value(status) if status is not None else None
        if not isinstance(status, str) or not status.strip():
            status = JobStatus.RUNNING.value

        document = {
            "object_type": JOB_RUN_COLLECTION,
            "name": self.name,
            "status": status,
            "progress": 0,
            "error": None,
        }
        key = id_where(self._id)
        self._writes.submit(
            "mark job as started",
            lambda: self.store.upsert(JOB_RUN_COLLECTION, key, document),
        )

    def on_update(
        self,
        progress_increment: float | None = None,
        status: JobStatus | str | None = None,
    ) -> None:
        """
        Add to the job's progress and optionally change its status.

        The increment is additive. Progress is expressed in percent, so the
        increments of a job should add up to no more than 100. An invalid
        increment together with no status records nothing but the log line.
        """
        status = status_value(status) if status is not None else None
        self.log(
            "Updating job [%s:%s] by %s percent with status: %s",
            self._id,
            self.name,
            progress_increment,
            status,
        )

        update = FieldUpdate()
        if _is_number(progress_increment):
            update.inc["progress"] = progress_increment
        if isinstance(status, str) and status.strip():
            update.set["status"] = status

        if update.is_empty:
            logger.debug(f"JobRunner[{self._id}]: nothing to update")
            return

        key = id_where(self._id)
        self._writes.submit(
            "update job progress",
            lambda: self.store.update_fields(JOB_RUN_COLLECTION, key, update),
        )

        if "progress" in update.inc:
            for listener in self._progress_listeners:
                listener(progress_increment)

    def on_completed(
        self,
        status: JobStatus | str | None = None,
        error: BaseException | str | None = None,
    ) -> None:
        """
        Mark the job finished, successfully or not.

        Status defaults to ERRORED when an error is given and COMPLETED
        otherwise. Progress is forced to 100. Only the first call on a
        runner is recorded.
        """
        if self._completed:
            logger.warning(
                f"JobRunner[{self._id}]: job already completed, ignoring status {status}"
            )
            return
        self._completed = True

        if not status:
            status = JobStatus.ERRORED if error is not None else JobStatus.COMPLETED
        status = status_value(status)

        self.log(
            "Setting job [%s:%s] as completed with status: %s", self._id, self.name, status
        )

        update = FieldUpdate(
            set={
                "status": status,
                "progress": 100,
                "error": format_error(error) if error is not None else None,
            }
        )
        key = id_where(self._id)
        self._writes.submit(
            "mark job as completed",
            lambda: self.store.update_fields(JOB_RUN_COLLECTION, key, update),
        )

    async def flush(self) -> None:
        """Wait until every write issued by this runner has settled."""
        await self._writes.join()
