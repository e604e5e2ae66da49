"""
In-process job store.

Keeps records in dicts. Suitable for tests and single-process tools where
job records do not need to outlive the process.
"""

import asyncio
import copy
import logging
from typing import Any

from jobtrack.core.storage.base import BaseJobStore, FieldUpdate
from jobtrack.core.storage.exceptions import DuplicateError, StorageError

logger = logging.getLogger(__name__)


class MemoryJobStore(BaseJobStore):
    """Dict-backed job store. Records are copied in and out."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._seq = 0
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    def _records(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _key_id(key: dict[str, Any]) -> str:
        if "id" not in key:
            raise StorageError(f"Key query must contain an id: {key}")
        return str(key["id"])

    async def upsert(
        self, collection: str, key: dict[str, Any], document: dict[str, Any]
    ) -> None:
        async with self._lock:
            records = self._records(collection)
            record_id = self._key_id(key)
            record = records.setdefault(record_id, {"id": record_id})
            record.update(copy.deepcopy(document))

    async def update_fields(
        self, collection: str, key: dict[str, Any], update: FieldUpdate
    ) -> int:
        async with self._lock:
            record = self._records(collection).get(self._key_id(key))
            if record is None or update.is_empty:
                return 0

            for name, amount in update.inc.items():
                record[name] = record.get(name, 0) + amount
            for name, value in update.set.items():
                if value is None:
                    record.pop(name, None)
                else:
                    record[name] = copy.deepcopy(value)
            return 1

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        async with self._lock:
            records = self._records(collection)
            if "id" in document:
                record_id = str(document["id"])
                if record_id in records:
                    raise DuplicateError(f"Record {record_id} already exists in {collection}")
            else:
                self._seq += 1
                record_id = str(self._seq)
            records[record_id] = {**copy.deepcopy(document), "id": record_id}
            return record_id

    async def get(self, collection: str, key: dict[str, Any]) -> dict[str, Any] | None:
        record = self._records(collection).get(self._key_id(key))
        return copy.deepcopy(record) if record is not None else None

    async def find(
        self, collection: str, where: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        where = where or {}
        return [
            copy.deepcopy(record)
            for record in self._records(collection).values()
            if all(record.get(k) == v for k, v in where.items())
        ]
