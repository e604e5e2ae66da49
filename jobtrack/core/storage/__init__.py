"""
Storage module.

Provides the job store contract and its backends:
- PostgreSQL for durable, queryable job records
- Redis for lightweight shared records across workers
- In-process memory for tests and single-process tools

Usage:
    from jobtrack.core.storage import get_job_store, id_where, FieldUpdate

    store = await get_job_store()
    await store.upsert("job_run", id_where(job_id), {"status": "RUNNING", "progress": 0})
    await store.update_fields("job_run", id_where(job_id), FieldUpdate(inc={"progress": 10}))
    record = await store.get("job_run", id_where(job_id))
"""

# Base classes and types
from jobtrack.core.storage.base import (
    JOB_LOG_COLLECTION,
    JOB_RUN_COLLECTION,
    BaseJobStore,
    CacheConfig,
    DatabaseConfig,
    FieldUpdate,
    id_where,
)

# Exceptions
from jobtrack.core.storage.exceptions import (
    ConfigurationError,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    UnknownCollectionError,
)

# Backend selection
from jobtrack.core.storage.factory import (
    close_job_store,
    create_job_store,
    get_job_store,
)

# In-process
from jobtrack.core.storage.memory import MemoryJobStore

# PostgreSQL
from jobtrack.core.storage.postgres import (
    Base,
    Database,
    PostgresJobStore,
)

# Redis
from jobtrack.core.storage.redis_store import RedisJobStore

__all__ = [
    # Base classes
    "BaseJobStore",
    "FieldUpdate",
    "id_where",
    "JOB_RUN_COLLECTION",
    "JOB_LOG_COLLECTION",
    # Config types
    "DatabaseConfig",
    "CacheConfig",
    # Exceptions
    "StorageError",
    "ConnectionError",
    "NotFoundError",
    "DuplicateError",
    "ConfigurationError",
    "UnknownCollectionError",
    # Backend selection
    "create_job_store",
    "get_job_store",
    "close_job_store",
    # Backends
    "MemoryJobStore",
    "Database",
    "Base",
    "PostgresJobStore",
    "RedisJobStore",
]
