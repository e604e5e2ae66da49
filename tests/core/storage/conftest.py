"""
Test fixtures for storage tests.

Provides connected instances of the PostgreSQL and Redis job stores.
Tests using them are skipped when the service is not reachable.
Run: docker-compose up -d postgres redis
"""

import os

import pytest
import pytest_asyncio

from jobtrack.core.storage.base import CacheConfig, DatabaseConfig
from jobtrack.core.storage.exceptions import ConnectionError
from jobtrack.core.storage.postgres import Database, PostgresJobStore
from jobtrack.core.storage.redis_store import RedisJobStore

# Use test databases to avoid polluting real job records
TEST_DB = "jobtrack_test"
TEST_REDIS_DB = 15
TEST_PREFIX = "jobtrack_test:"


@pytest.fixture
def database_config() -> DatabaseConfig:
    """Database configuration for tests."""
    return DatabaseConfig(
        host=os.getenv("POSTGRES_HOST", "localhost"),
        port=int(os.getenv("POSTGRES_PORT", "5432")),
        database=os.getenv("POSTGRES_TEST_DB", TEST_DB),
        user=os.getenv("POSTGRES_USER", "jobtrack"),
        password=os.getenv("POSTGRES_PASSWORD", "jobtrack"),
        pool_size=2,
        pool_max_overflow=2,
        echo=False,
    )


@pytest.fixture
def cache_config() -> CacheConfig:
    """Redis configuration for tests."""
    return CacheConfig(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", "6379")),
        db=TEST_REDIS_DB,
        password=os.getenv("REDIS_PASSWORD", ""),
        max_connections=5,
        prefix=TEST_PREFIX,
    )


@pytest_asyncio.fixture
async def postgres_store(database_config: DatabaseConfig) -> PostgresJobStore:
    """
    Provide a PostgreSQL job store with fresh tables.

    Creates tables at setup and drops them at teardown.
    """
    # Register the job tables with Base.metadata
    from jobtrack.core.models import JobLog, JobRun  # noqa: F401

    db = Database(database_config)
    await db.connect()
    if not await db.health_check():
        await db.disconnect()
        pytest.skip("PostgreSQL unavailable")

    await db.drop_tables()
    await db.create_tables()

    yield PostgresJobStore(db)

    await db.drop_tables()
    await db.disconnect()


@pytest_asyncio.fixture
async def redis_store(cache_config: CacheConfig) -> RedisJobStore:
    """Provide a Redis job store on an empty test database."""
    store = RedisJobStore(cache_config)
    try:
        await store.connect()
    except ConnectionError as e:
        pytest.skip(f"Redis unavailable: {e}")

    await store.flush_db()
    yield store
    await store.flush_db()
    await store.disconnect()
