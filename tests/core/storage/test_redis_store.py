"""
Tests for the Redis job store.

Requires docker-compose redis service to be running.
Run: docker-compose up -d redis
"""

import pytest

from jobtrack.core.jobs.runner import JobRunner
from jobtrack.core.storage.base import FieldUpdate, id_where
from jobtrack.core.storage.exceptions import StorageError
from jobtrack.core.storage.redis_store import RedisJobStore

pytestmark = pytest.mark.integration


async def test_health_check(redis_store: RedisJobStore) -> None:
    """Store reports a reachable Redis."""
    assert await redis_store.health_check() is True


async def test_upsert_and_get(redis_store: RedisJobStore) -> None:
    """Values keep their types through the hash encoding."""
    await redis_store.upsert(
        "job_run", id_where("job-1"), {"name": "reindex", "status": "RUNNING", "progress": 0, "error": None}
    )

    record = await redis_store.get("job_run", id_where("job-1"))
    assert record == {
        "id": "job-1",
        "name": "reindex",
        "status": "RUNNING",
        "progress": 0,
        "error": None,
    }


async def test_update_fields(redis_store: RedisJobStore) -> None:
    """Increments use HINCRBYFLOAT, None clears a field."""
    await redis_store.upsert("job_run", id_where("job-1"), {"status": "RUNNING", "progress": 0, "error": "x"})

    await redis_store.update_fields("job_run", id_where("job-1"), FieldUpdate(inc={"progress": 10}))
    await redis_store.update_fields(
        "job_run", id_where("job-1"), FieldUpdate(inc={"progress": 15}, set={"error": None})
    )

    record = await redis_store.get("job_run", id_where("job-1"))
    assert record["progress"] == 25
    assert "error" not in record


async def test_update_fields_missing_record(redis_store: RedisJobStore) -> None:
    """update_fields() never creates a record."""
    matched = await redis_store.update_fields(
        "job_run", id_where("ghost"), FieldUpdate(inc={"progress": 5})
    )

    assert matched == 0
    assert await redis_store.get("job_run", id_where("ghost")) is None


async def test_find_by_job_id(redis_store: RedisJobStore) -> None:
    """Log entries are listed per job in insertion order."""
    await redis_store.insert("job_log", {"job_id": "a", "message": "one"})
    await redis_store.insert("job_log", {"job_id": "b", "message": "other"})
    await redis_store.insert("job_log", {"job_id": "a", "message": "two"})

    logs = await redis_store.find("job_log", {"job_id": "a"})

    assert [log["message"] for log in logs] == ["one", "two"]


async def test_find_by_name(redis_store: RedisJobStore) -> None:
    """Unindexed fields are filtered after a collection scan."""
    await redis_store.upsert("job_run", id_where("1"), {"name": "reindex"})
    await redis_store.upsert("job_run", id_where("2"), {"name": "import"})
    await redis_store.upsert("job_run", id_where("1"), {"name": "reindex"})

    found = await redis_store.find("job_run", {"name": "reindex"})

    assert [d["id"] for d in found] == ["1"]


async def test_key_must_be_id(redis_store: RedisJobStore) -> None:
    with pytest.raises(StorageError):
        await redis_store.get("job_run", {"name": "reindex"})


async def test_runner_lifecycle(redis_store: RedisJobStore) -> None:
    """A full job lifecycle lands in Redis."""
    runner = JobRunner(redis_store, "reindex", worker_id="w")
    runner.on_start()
    runner.on_update(10)
    runner.on_update(15)
    await runner.flush()

    record = await redis_store.get("job_run", id_where(runner.id))
    assert record["progress"] == 25

    runner.on_completed()
    await runner.flush()

    record = await redis_store.get("job_run", id_where(runner.id))
    assert record["status"] == "COMPLETED"
    assert record["progress"] == 100
    assert "error" not in record
