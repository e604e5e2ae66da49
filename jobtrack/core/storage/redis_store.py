"""
Redis job store implementation.

Keeps each record in a hash, with per-collection index lists so records
can be listed in insertion order. Progress increments use HINCRBYFLOAT,
which Redis applies atomically per key.
Uses redis-py with async support.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from jobtrack.core.config.loader import get_config
from jobtrack.core.storage.base import BaseJobStore, CacheConfig, FieldUpdate
from jobtrack.core.storage.exceptions import (
    ConfigurationError,
    ConnectionError,
    StorageError,
)

logger = logging.getLogger(__name__)

# Fields that get a secondary index list for find()
INDEXED_FIELDS = ("job_id",)


def _encode(document: dict[str, Any]) -> dict[str, str]:
    return {k: json.dumps(v) for k, v in document.items()}


def _decode(mapping: dict[str, str]) -> dict[str, Any]:
    return {k: json.loads(v) for k, v in mapping.items()}


class RedisJobStore(BaseJobStore):
    """
    Redis job store.

    Usage:
        store = RedisJobStore(config)
        await store.connect()

        await store.upsert("job_run", id_where("abc"), {"status": "RUNNING", "progress": 0})
        await store.update_fields("job_run", id_where("abc"), FieldUpdate(inc={"progress": 5}))

        await store.disconnect()
    """

    def __init__(self, config: CacheConfig):
        """Initialize store with configuration."""
        self.config = config
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish connection to Redis."""
        if self._client is not None:
            return

        try:
            self._client = redis.Redis(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password if self.config.password else None,
                max_connections=self.config.max_connections,
                decode_responses=True,
            )
            # Test connection
            await self._client.ping()
            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        except Exception as e:
            self._client = None
            raise ConnectionError(f"Failed to connect to Redis: {e}") from e

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from Redis")

    async def health_check(self) -> bool:
        """Check if Redis is reachable."""
        if self._client is None:
            return False

        try:
            await self._client.ping()
            return True
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    def _get_client(self) -> redis.Redis:
        """Get Redis client, raising if not connected."""
        if self._client is None:
            raise ConnectionError("Job store not connected. Call connect() first.")
        return self._client

    def _record_key(self, collection: str, record_id: str) -> str:
        return f"{self.config.prefix}{collection}:{record_id}"

    def _index_key(self, collection: str, field: str | None = None, value: Any = None) -> str:
        if field is None:
            return f"{self.config.prefix}{collection}:_index"
        return f"{self.config.prefix}{collection}:_by_{field}:{value}"

    @staticmethod
    def _key_id(key: dict[str, Any]) -> str:
        if set(key) != {"id"}:
            raise StorageError(f"Redis store only supports id key queries, got: {key}")
        return str(key["id"])

    async def upsert(
        self, collection: str, key: dict[str, Any], document: dict[str, Any]
    ) -> None:
        client = self._get_client()
        record_id = self._key_id(key)
        record_key = self._record_key(collection, record_id)

        try:
            created = await client.hsetnx(record_key, "id", json.dumps(record_id))
            if created:
                await client.rpush(self._index_key(collection), record_id)
            await client.hset(record_key, mapping=_encode(document))
        except RedisError as e:
            raise StorageError(f"Upsert into {collection} failed: {e}") from e

    async def update_fields(
        self, collection: str, key: dict[str, Any], update: FieldUpdate
    ) -> int:
        client = self._get_client()
        record_key = self._record_key(collection, self._key_id(key))
        if update.is_empty:
            return 0

        try:
            if not await client.exists(record_key):
                return 0

            async with client.pipeline(transaction=True) as pipe:
                for name, amount in update.inc.items():
                    pipe.hincrbyfloat(record_key, name, amount)
                for name, value in update.set.items():
                    if value is None:
                        pipe.hdel(record_key, name)
                    else:
                        pipe.hset(record_key, name, json.dumps(value))
                await pipe.execute()
        except RedisError as e:
            raise StorageError(f"Update of {collection} failed: {e}") from e

        return 1

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        client = self._get_client()

        try:
            record_id = str(await client.incr(f"{self.config.prefix}{collection}:_seq"))
            async with client.pipeline(transaction=True) as pipe:
                pipe.hset(
                    self._record_key(collection, record_id),
                    mapping=_encode({**document, "id": record_id}),
                )
                pipe.rpush(self._index_key(collection), record_id)
                for field in INDEXED_FIELDS:
                    if field in document:
                        pipe.rpush(
                            self._index_key(collection, field, document[field]), record_id
                        )
                await pipe.execute()
        except RedisError as e:
            raise StorageError(f"Insert into {collection} failed: {e}") from e

        return record_id

    async def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        client = self._get_client()
        mapping = await client.hgetall(self._record_key(collection, self._key_id(key)))
        if not mapping:
            return None
        return _decode(mapping)

    async def find(
        self, collection: str, where: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        client = self._get_client()
        where = where or {}

        index_key = self._index_key(collection)
        for field in INDEXED_FIELDS:
            if field in where:
                index_key = self._index_key(collection, field, where[field])
                break

        record_ids = await client.lrange(index_key, 0, -1)
        if not record_ids:
            return []

        async with client.pipeline(transaction=False) as pipe:
            for record_id in record_ids:
                pipe.hgetall(self._record_key(collection, record_id))
            mappings = await pipe.execute()

        documents = [_decode(m) for m in mappings if m]
        return [d for d in documents if all(d.get(k) == v for k, v in where.items())]

    async def flush_db(self) -> None:
        """Delete all keys in current database. Use with caution."""
        client = self._get_client()
        await client.flushdb()
        logger.warning("Redis database flushed")


def load_redis_config() -> CacheConfig:
    """Load Redis configuration from config files."""
    config = get_config()
    redis_config = config.get("redis", {})

    if not redis_config:
        raise ConfigurationError("Redis configuration not found")

    return CacheConfig(
        host=redis_config.get("host", "localhost"),
        port=int(redis_config.get("port", 6379)),
        db=int(redis_config.get("db", 0)),
        password=redis_config.get("password", ""),
        max_connections=int(redis_config.get("max_connections", 10)),
        prefix=config.get("jobs", {}).get("redis_prefix", "jobtrack:"),
    )
