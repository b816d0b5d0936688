"""Durable key/value stores backing the second cache tier.

Every operation here may fail (capacity, corruption, disabled storage).
Callers wrap them with StoreResult.attempt and never let a failure escape.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreError(Exception):
    """Durable store operation failed."""


class StoreFullError(StoreError):
    """Store rejected a write because its capacity is exhausted."""


class DurableStore(Protocol):
    """Synchronous string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a best-effort durable operation."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def attempt(cls, fn: Callable[..., T], *args: Any) -> StoreResult[T]:
        """Run a store or codec call, capturing any failure as a result."""
        try:
            return cls(value=fn(*args))
        except Exception as e:
            return cls(error=e)


class MemoryStore:
    """Dict-backed store with an optional size quota (in characters)."""

    def __init__(self, max_bytes: int | None = None):
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes

    def _used(self) -> int:
        return sum(len(k) + len(v) for k, v in self._data.items())

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            current = self._data.get(key)
            used = self._used()
            if current is not None:
                used -= len(key) + len(current)
            if used + len(key) + len(value) > self._max_bytes:
                raise StoreFullError(
                    f"quota of {self._max_bytes} exceeded writing {key!r}"
                )
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SqliteStore:
    """SQLite-backed store that survives process restarts."""

    def __init__(self, db_path: str | Path, max_entries: int | None = None):
        self.db_path = str(db_path)
        self._max_entries = max_entries
        self._conn: sqlite3.Connection | None = None

    def _connection(self) -> sqlite3.Connection:
        """Open the database and ensure the table exists."""
        if self._conn is not None:
            return self._conn

        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"cannot open cache store at {self.db_path}: {e}") from e

        self._conn = conn
        logger.debug("cache_store_opened", extra={"db_path": self.db_path})
        return conn

    def get(self, key: str) -> str | None:
        try:
            row = self._connection().execute(
                "SELECT value FROM cache_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._connection()
        try:
            if self._max_entries is not None:
                exists = conn.execute(
                    "SELECT 1 FROM cache_store WHERE key = ?", (key,)
                ).fetchone()
                (count,) = conn.execute("SELECT COUNT(*) FROM cache_store").fetchone()
                if not exists and count >= self._max_entries:
                    raise StoreFullError(
                        f"cache store holds {count} entries (max {self._max_entries})"
                    )
            conn.execute(
                """
                INSERT INTO cache_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def delete(self, key: str) -> None:
        conn = self._connection()
        try:
            conn.execute("DELETE FROM cache_store WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def keys(self) -> list[str]:
        try:
            rows = self._connection().execute("SELECT key FROM cache_store").fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return [row[0] for row in rows]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
