"""Durable store — named JSON records behind an async get/set port.

The goals engine and the book repository only ever see ``RecordStore``.
``MemoryStore`` backs tests; ``SqlRecordStore`` keeps every record as one row
of ``reading_records`` (record_key, payload TEXT) and commits on each write,
so a write is all-or-nothing from the caller's point of view.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class RecordStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store. Values are deep-copied in and out like a real serializer."""

    def __init__(self, records: dict[str, Any] | None = None):
        self._records: dict[str, Any] = copy.deepcopy(records) if records else {}

    async def get(self, key: str) -> Any | None:
        if key not in self._records:
            return None
        return copy.deepcopy(self._records[key])

    async def set(self, key: str, value: Any) -> None:
        self._records[key] = copy.deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._records)


class SqlRecordStore:
    """Store backed by the ``reading_records`` table (SQLite or PostgreSQL)."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> Any | None:
        result = await self._session.execute(
            text("SELECT payload FROM reading_records WHERE record_key = :key"),
            {"key": key},
        )
        row = result.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    async def set(self, key: str, value: Any) -> None:
        await self._session.execute(
            text(
                "INSERT INTO reading_records (record_key, payload) VALUES (:key, :payload) "
                "ON CONFLICT (record_key) DO UPDATE SET payload = excluded.payload"
            ),
            {"key": key, "payload": json.dumps(value)},
        )
        await self._session.commit()


async def load_list(store: RecordStore, key: str) -> list[dict[str, Any]]:
    """Read a list record; a missing record reads as empty."""
    value = await store.get(key)
    return list(value) if value else []
