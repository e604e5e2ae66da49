"""Tests for job store backend selection and the process-wide store."""

from unittest.mock import patch

import pytest

from jobtrack.core import storage
from jobtrack.core.config.loader import JobsConfig
from jobtrack.core.storage import factory
from jobtrack.core.storage.exceptions import ConfigurationError
from jobtrack.core.storage.memory import MemoryJobStore


@pytest.fixture(autouse=True)
def _reset_global_store():
    factory._store_instance = None
    yield
    factory._store_instance = None


def test_create_memory_store() -> None:
    assert isinstance(factory.create_job_store("memory"), MemoryJobStore)


def test_create_unknown_backend() -> None:
    with pytest.raises(ConfigurationError):
        factory.create_job_store("mongodb")


async def test_get_job_store_is_shared() -> None:
    """get_job_store() builds the configured backend once per process."""
    with patch(
        "jobtrack.core.storage.factory.load_jobs_config",
        return_value=JobsConfig(store="memory"),
    ) as mock_config:
        first = await factory.get_job_store()
        second = await factory.get_job_store()

    assert first is second
    assert isinstance(first, MemoryJobStore)
    mock_config.assert_called_once()


async def test_close_job_store_resets_instance() -> None:
    with patch(
        "jobtrack.core.storage.factory.load_jobs_config",
        return_value=JobsConfig(store="memory"),
    ):
        first = await factory.get_job_store()
        await factory.close_job_store()
        second = await factory.get_job_store()

    assert first is not second


def test_storage_exports_one_global_accessor() -> None:
    """The package exposes the job store accessor and no PostgreSQL-only one."""
    assert "get_job_store" in storage.__all__
    assert "close_job_store" in storage.__all__
    assert not hasattr(storage, "get_db")
    assert not hasattr(storage, "close_db")
