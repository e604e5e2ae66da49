"""
Base interfaces for job stores.

All persistence backends must follow these interfaces.
This ensures job runners can swap engines without changing job code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Collection holding one record per job instance
JOB_RUN_COLLECTION = "job_run"

# Collection holding the append-only log trail of every job
JOB_LOG_COLLECTION = "job_log"


def id_where(job_id: str) -> dict[str, Any]:
    """Build an equality key query on a record id."""
    return {"id": job_id}


@dataclass
class FieldUpdate:
    """
    A partial update to a stored record.

    Fields in ``inc`` are added to the stored numeric value, fields in
    ``set`` overwrite the stored value. A value of None in ``set`` clears
    the field.
    """

    inc: dict[str, float] = field(default_factory=dict)
    set: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.inc and not self.set


# =============================================================================
# Backend configuration
# =============================================================================


@dataclass
class DatabaseConfig:
    """Configuration for PostgreSQL database."""

    host: str = "localhost"
    port: int = 5432
    database: str = "jobtrack"
    user: str = "jobtrack"
    password: str = "jobtrack"
    pool_size: int = 5
    pool_max_overflow: int = 10
    echo: bool = False


@dataclass
class CacheConfig:
    """Configuration for Redis."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str = ""
    max_connections: int = 10
    prefix: str = "jobtrack:"


# =============================================================================
# Job store
# =============================================================================


class BaseJobStore(ABC):
    """
    Abstract base class for job record persistence.

    Records are plain dicts grouped into named collections. Records in
    keyed collections are addressed by a key query built with id_where().

    Usage:
        store = SomeJobStore(config)
        await store.connect()

        await store.upsert("job_run", id_where("abc"), {"status": "RUNNING"})
        await store.update_fields("job_run", id_where("abc"), FieldUpdate(inc={"progress": 10}))
        record = await store.get("job_run", id_where("abc"))

        await store.disconnect()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the backend."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close backend connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        pass

    @abstractmethod
    async def upsert(
        self, collection: str, key: dict[str, Any], document: dict[str, Any]
    ) -> None:
        """Create the record matching key, or overwrite its fields with document."""
        pass

    @abstractmethod
    async def update_fields(
        self, collection: str, key: dict[str, Any], update: FieldUpdate
    ) -> int:
        """
        Apply a partial update to the record matching key.

        Never creates a record. Returns the number of records matched.
        """
        pass

    @abstractmethod
    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        """Append a new record with a generated key. Returns the key."""
        pass

    @abstractmethod
    async def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        """Get the record matching key. Returns None if not found."""
        pass

    @abstractmethod
    async def find(
        self, collection: str, where: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Get all records whose fields equal where, oldest first."""
        pass
