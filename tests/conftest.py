"""
Shared test fixtures.

Unit tests run against the in-process job store so they need no services.
"""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobtrack.core.config.loader import get_config
from jobtrack.core.jobs.runner import JobRunner
from jobtrack.core.storage.base import BaseJobStore
from jobtrack.core.storage.exceptions import StorageError
from jobtrack.core.storage.memory import MemoryJobStore

TEST_WORKER_ID = "test-worker"


@pytest.fixture(autouse=True)
def _clear_config_cache() -> None:
    """Keep config caching from leaking between tests."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def store() -> MemoryJobStore:
    """Provide an empty in-process job store."""
    return MemoryJobStore()


@pytest.fixture
def failing_store() -> MagicMock:
    """Provide a job store whose every write fails."""
    store = MagicMock(spec=BaseJobStore)
    store.upsert = AsyncMock(side_effect=StorageError("database is down"))
    store.update_fields = AsyncMock(side_effect=StorageError("database is down"))
    store.insert = AsyncMock(side_effect=StorageError("database is down"))
    return store


@pytest.fixture
def make_runner(store: MemoryJobStore) -> Callable[..., JobRunner]:
    """Factory for runners writing to the test store."""

    def _make(name: str | None = None, job_id: str | None = None, **kwargs) -> JobRunner:
        kwargs.setdefault("worker_id", TEST_WORKER_ID)
        return JobRunner(kwargs.pop("store", store), name, job_id, **kwargs)

    return _make
