"""
Service for reading job run records.

Gives observers (admin pages, CLIs, tests) a typed view of what running
and finished jobs have persisted, whichever store backend holds them.
"""

import logging

from jobtrack.core.jobs.types import JobLogEntry, JobRunRecord
from jobtrack.core.storage.base import (
    JOB_LOG_COLLECTION,
    JOB_RUN_COLLECTION,
    BaseJobStore,
    id_where,
)
from jobtrack.core.storage.factory import get_job_store

logger = logging.getLogger(__name__)


class JobRunService:
    """
    Read access to job_run records and their job_log trail.
    """

    def __init__(self, store: BaseJobStore | None = None) -> None:
        """Initialize with a job store, or None to use get_job_store() lazily."""
        self._store = store

    async def _get_store(self) -> BaseJobStore:
        """Get the job store, resolving lazily if needed."""
        if self._store is None:
            self._store = await get_job_store()
        return self._store

    async def get_run(self, job_id: str) -> JobRunRecord | None:
        """
        Get the record of a job.

        Args:
            job_id: Id of the job.

        Returns:
            The JobRunRecord, or None if the job never started.
        """
        store = await self._get_store()
        document = await store.get(JOB_RUN_COLLECTION, id_where(job_id))
        if document is None:
            logger.debug(f"Job run not found: {job_id}")
            return None
        return JobRunRecord.from_document(document)

    async def get_logs(self, job_id: str) -> list[JobLogEntry]:
        """
        Get the log trail of a job, oldest first.

        Args:
            job_id: Id of the job.
        """
        store = await self._get_store()
        documents = await store.find(JOB_LOG_COLLECTION, {"job_id": job_id})
        return [JobLogEntry.from_document(d) for d in documents]

    async def get_latest(self, name: str) -> JobRunRecord | None:
        """
        Get the most recently created run of a job name.

        Args:
            name: Name of the job.

        Returns:
            The newest JobRunRecord, or None if no runs exist.
        """
        store = await self._get_store()
        documents = await store.find(JOB_RUN_COLLECTION, {"name": name})
        if not documents:
            return None
        return JobRunRecord.from_document(documents[-1])
