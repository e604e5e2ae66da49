"""
Tests for the PostgreSQL job store.

Requires docker-compose postgres service to be running.
Run: docker-compose up -d postgres
"""

import pytest

from jobtrack.core.jobs.runner import JobRunner
from jobtrack.core.storage.base import FieldUpdate, id_where
from jobtrack.core.storage.exceptions import UnknownCollectionError
from jobtrack.core.storage.postgres import PostgresJobStore

pytestmark = pytest.mark.integration


async def test_health_check(postgres_store: PostgresJobStore) -> None:
    """Store reports a reachable database."""
    assert await postgres_store.health_check() is True


async def test_upsert_and_get(postgres_store: PostgresJobStore) -> None:
    """upsert() inserts then updates the same row."""
    document = {"object_type": "job_run", "name": "reindex", "status": "RUNNING", "progress": 0}
    await postgres_store.upsert("job_run", id_where("job-1"), document)
    await postgres_store.upsert("job_run", id_where("job-1"), {**document, "status": "QUEUED"})

    record = await postgres_store.get("job_run", id_where("job-1"))
    assert record["id"] == "job-1"
    assert record["status"] == "QUEUED"
    assert record["progress"] == 0
    assert len(await postgres_store.find("job_run")) == 1


async def test_update_fields_is_additive(postgres_store: PostgresJobStore) -> None:
    """Increments are applied in SQL on top of the stored value."""
    await postgres_store.upsert(
        "job_run", id_where("job-1"), {"name": "reindex", "status": "RUNNING", "progress": 0}
    )

    await postgres_store.update_fields("job_run", id_where("job-1"), FieldUpdate(inc={"progress": 10}))
    matched = await postgres_store.update_fields(
        "job_run", id_where("job-1"), FieldUpdate(inc={"progress": 15}, set={"status": "INDEXING"})
    )

    assert matched == 1
    record = await postgres_store.get("job_run", id_where("job-1"))
    assert record["progress"] == 25
    assert record["status"] == "INDEXING"


async def test_update_fields_missing_row(postgres_store: PostgresJobStore) -> None:
    """update_fields() matches nothing for an unknown id."""
    matched = await postgres_store.update_fields(
        "job_run", id_where("ghost"), FieldUpdate(set={"status": "COMPLETED"})
    )
    assert matched == 0


async def test_insert_and_find_logs(postgres_store: PostgresJobStore) -> None:
    """Log rows are appended and found by job id."""
    for message in ["one", "two"]:
        await postgres_store.insert(
            "job_log",
            {
                "object_type": "job_log",
                "job_id": "job-1",
                "worker_id": "w",
                "name": "reindex",
                "message": message,
                "metadata": {},
            },
        )

    logs = await postgres_store.find("job_log", {"job_id": "job-1"})
    assert [log["message"] for log in logs] == ["one", "two"]
    assert logs[0]["metadata"] == {}


async def test_unknown_collection(postgres_store: PostgresJobStore) -> None:
    with pytest.raises(UnknownCollectionError):
        await postgres_store.get("jobs", id_where("job-1"))


async def test_runner_lifecycle(postgres_store: PostgresJobStore) -> None:
    """A full job lifecycle lands in the job_run table."""
    runner = JobRunner(postgres_store, "reindex", worker_id="w")
    runner.on_start()
    runner.on_update(50, "RUNNING")
    runner.on_update(50)
    runner.on_completed(error=RuntimeError("partial failure"))
    await runner.flush()

    record = await postgres_store.get("job_run", id_where(runner.id))
    assert record["status"] == "ERRORED"
    assert record["progress"] == 100
    assert "partial failure" in record["error"]
