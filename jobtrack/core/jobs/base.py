"""
Base class for jobs.

A job owns a JobRunner and implements run(). The runner carries identity,
progress and reporting, so concrete jobs only describe their work.
"""

from abc import ABC, abstractmethod
from typing import Any

from jobtrack.core.jobs.runner import JobRunner
from jobtrack.core.jobs.types import JobStatus


class Job(ABC):
    """
    Abstract base class for jobs.

    Subclasses implement run(), calling on_start() once, on_update() as
    work progresses and on_completed() exactly once, then return the
    job's result or raise its error.

    Usage:
        class ReindexJob(Job):
            async def run(self) -> int:
                self.on_start()
                count = await rebuild_index()
                self.on_update(100)
                self.on_completed()
                return count

        job = ReindexJob(JobRunner(store, "reindex"))
        result = await execute(job)
    """

    def __init__(self, runner: JobRunner) -> None:
        self.runner = runner

    @property
    def id(self) -> str:
        return self.runner.id

    @property
    def name(self) -> str:
        return self.runner.name

    @abstractmethod
    async def run(self) -> Any:
        """Do the job's work and return its result."""
        raise NotImplementedError(
            f"{type(self).__name__}.run() must be overridden by a concrete job"
        )

    def log(self, message: str, *args: Any) -> None:
        self.runner.log(message, *args)

    def on_start(self, status: JobStatus | str = JobStatus.RUNNING) -> None:
        self.runner.on_start(status)

    def on_update(
        self,
        progress_increment: float | None = None,
        status: JobStatus | str | None = None,
    ) -> None:
        self.runner.on_update(progress_increment, status)

    def on_completed(
        self,
        status: JobStatus | str | None = None,
        error: BaseException | str | None = None,
    ) -> None:
        self.runner.on_completed(status, error)
