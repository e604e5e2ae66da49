"""
Process-wide job store accessor.

Picks the backend named by the jobs.store setting and keeps one connected
instance per process.
"""

import logging

from jobtrack.core.config.loader import load_jobs_config
from jobtrack.core.storage import postgres, redis_store
from jobtrack.core.storage.base import BaseJobStore
from jobtrack.core.storage.exceptions import ConfigurationError
from jobtrack.core.storage.memory import MemoryJobStore

logger = logging.getLogger(__name__)

STORE_BACKENDS = ["postgres", "redis", "memory"]

# Global job store instance
_store_instance: BaseJobStore | None = None


def create_job_store(backend: str) -> BaseJobStore:
    """
    Build an unconnected job store for the named backend.

    Raises:
        ConfigurationError: If the backend is unknown or its config is missing.
    """
    if backend == "postgres":
        return postgres.PostgresJobStore(postgres.Database(postgres.load_database_config()))
    if backend == "redis":
        return redis_store.RedisJobStore(redis_store.load_redis_config())
    if backend == "memory":
        return MemoryJobStore()

    raise ConfigurationError(
        f"Unknown job store backend: {backend}. Expected one of {STORE_BACKENDS}"
    )


async def get_job_store() -> BaseJobStore:
    """
    Get the global job store instance.

    Creates and connects the instance on first call.
    Subsequent calls return the same instance.

    Returns:
        Connected job store.
    """
    global _store_instance

    if _store_instance is None:
        config = load_jobs_config()
        store = create_job_store(config.store)
        await store.connect()
        _store_instance = store
        logger.info(f"Job store ready: {config.store}")

    return _store_instance


async def close_job_store() -> None:
    """Close the global job store instance."""
    global _store_instance

    if _store_instance is not None:
        await _store_instance.disconnect()
        _store_instance = None
