"""
Jobs — background work that reports its own progress.

A concrete job subclasses Job, receives a JobRunner, and reports its
lifecycle through it while doing its work.

Usage:
    from jobtrack.core.jobs import Job, JobRunner, execute

    class ReindexJob(Job):
        async def run(self) -> None:
            self.on_start()
            ...
            self.on_completed()

    await execute(ReindexJob(JobRunner(store, "reindex")))
"""

from jobtrack.core.jobs.base import Job
from jobtrack.core.jobs.composite import CompositeJob
from jobtrack.core.jobs.exceptions import InvalidArgumentError, JobError
from jobtrack.core.jobs.executor import execute
from jobtrack.core.jobs.runner import JobRunner, format_error
from jobtrack.core.jobs.types import JobLogEntry, JobRunRecord, JobStatus
from jobtrack.core.jobs.write_queue import JobWriteQueue

__all__ = [
    "Job",
    "JobRunner",
    "CompositeJob",
    "execute",
    "format_error",
    "JobStatus",
    "JobRunRecord",
    "JobLogEntry",
    "JobWriteQueue",
    "JobError",
    "InvalidArgumentError",
]
