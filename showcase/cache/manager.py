"""Two-tier TTL cache shared by every remote read.

Tier 1 (fast): in-process dict, authoritative for the process lifetime.
Tier 2 (durable): optional DurableStore, consulted on a fast-tier miss so a
restarted process can serve warm data. Durable failures never reach callers.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .codec import Codec, JsonCodec
from .entry import CacheEntry
from .stores import DurableStore, StoreResult

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60
DEFAULT_KEY_PREFIX = "cache_"


@dataclass
class CacheStats:
    """Diagnostic snapshot of the cache."""

    size: int
    durable_size: int
    keys: list[str] = field(default_factory=list)
    approximate_memory_footprint: int = 0


class CacheManager:
    """Expiry-aware key/value cache with a fast and a durable tier."""

    def __init__(
        self,
        store: DurableStore | None = None,
        codec: Codec | None = None,
        *,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ):
        if not (default_ttl > 0 and math.isfinite(default_ttl)):
            raise ValueError(f"default_ttl must be a positive number, got {default_ttl!r}")
        self._fast: dict[str, CacheEntry[Any]] = {}
        self._store = store
        self._codec = codec or JsonCodec()
        self._default_ttl = default_ttl
        self._prefix = key_prefix
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(
        cls, settings: Settings, store: DurableStore | None = None
    ) -> CacheManager:
        return cls(
            store,
            default_ttl=settings.cache_default_ttl,
            key_prefix=settings.cache_key_prefix,
        )

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def _durable_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _warn(self, event: str, key: str, result: StoreResult[Any]) -> None:
        logger.warning(
            event,
            extra={
                "key": key,
                "error_type": type(result.error).__name__,
                "error": str(result.error),
            },
        )

    def _durable_write(self, key: str, entry: CacheEntry[Any]) -> StoreResult[None]:
        encoded = StoreResult.attempt(self._codec.encode, entry.to_dict())
        if not encoded.ok:
            return StoreResult(error=encoded.error)
        return StoreResult.attempt(self._store.set, self._durable_key(key), encoded.value)

    def _durable_remove(self, key: str) -> None:
        if self._store is None:
            return
        result = StoreResult.attempt(self._store.delete, self._durable_key(key))
        if not result.ok:
            self._warn("cache_durable_delete_failed", key, result)

    def _durable_read(self, key: str) -> CacheEntry[Any] | None:
        """Load an entry from the durable tier; corrupt payloads are purged."""
        if self._store is None:
            return None

        raw = StoreResult.attempt(self._store.get, self._durable_key(key))
        if not raw.ok:
            self._warn("cache_durable_read_failed", key, raw)
            return None
        if raw.value is None:
            return None

        decoded = StoreResult.attempt(self._decode, raw.value)
        if not decoded.ok:
            self._warn("cache_durable_payload_corrupted", key, decoded)
            self._durable_remove(key)
            return None
        return decoded.value

    def _decode(self, raw: str) -> CacheEntry[Any]:
        return CacheEntry.from_dict(self._codec.decode(raw))

    def _durable_keys(self) -> list[str]:
        """Un-prefixed keys held by the durable tier."""
        if self._store is None:
            return []
        listed = StoreResult.attempt(self._store.keys)
        if not listed.ok:
            self._warn("cache_durable_list_failed", "*", listed)
            return []
        n = len(self._prefix)
        return [k[n:] for k in listed.value if k.startswith(self._prefix)]

    def _checked(self, key: str, ttl: float | None) -> float:
        """Validate key and resolve the TTL. Raises ValueError."""
        if not isinstance(key, str) or not key:
            raise ValueError("cache key must be a non-empty string")
        ttl = self._default_ttl if ttl is None else ttl
        if not (ttl > 0 and math.isfinite(ttl)):
            raise ValueError(f"ttl must be a positive number, got {ttl!r}")
        return ttl

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store value for ``ttl`` seconds (default TTL when omitted)."""
        entry = CacheEntry.create(value, self._clock(), self._checked(key, ttl))
        self._fast[key] = entry

        if self._store is not None:
            result = self._durable_write(key, entry)
            if not result.ok:
                self._warn("cache_durable_write_failed", key, result)
                # A stale durable value must not outlive its replacement
                self._durable_remove(key)

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None on miss/expiry."""
        now = self._clock()

        entry = self._fast.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                return entry.data
            self.delete(key)
            return None

        entry = self._durable_read(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            self._durable_remove(key)
            return None

        self._fast[key] = entry
        logger.debug("cache_promoted", extra={"key": key})
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        """Remove key from both tiers."""
        self._fast.pop(key, None)
        self._durable_remove(key)

    def clear(self) -> None:
        """Remove every entry from both tiers. Foreign durable keys are kept."""
        self._fast.clear()
        for key in self._durable_keys():
            self._durable_remove(key)
        logger.info("cache_cleared")

    def cleanup(self) -> int:
        """Drop expired entries from both tiers.

        Returns:
            Number of fast-tier entries removed
        """
        now = self._clock()
        expired = [k for k, e in self._fast.items() if e.is_expired(now)]
        for key in expired:
            self.delete(key)

        purged = 0
        for key in self._durable_keys():
            if key in self._fast:
                continue
            entry = self._durable_read(key)
            if entry is None or entry.is_expired(now):
                self._durable_remove(key)
                purged += 1

        if expired or purged:
            logger.info(
                "cache_cleanup",
                extra={"expired_count": len(expired), "durable_purged": purged},
            )
        return len(expired)

    def preload(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
    ) -> asyncio.Task[None] | None:
        """Populate key in the background unless it is already cached.

        Must be called from a running event loop. Returns the scheduled task
        (callers may ignore it), or None when the key is already cached.
        Invalid keys and TTLs raise ValueError here, before any fetch.
        """
        ttl = self._checked(key, ttl)
        if self.has(key):
            return None

        task = asyncio.get_running_loop().create_task(self._run_preload(key, fetcher, ttl))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_preload(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: float,
    ) -> None:
        try:
            data = await fetcher()
        except Exception as e:
            logger.warning(
                "cache_preload_failed",
                extra={"key": key, "error_type": type(e).__name__, "error": str(e)},
            )
            return
        self.set(key, data, ttl)
        logger.debug("cache_preloaded", extra={"key": key})

    def get_stats(self) -> CacheStats:
        """Snapshot for diagnostics. Does not touch expiry or promotion."""
        durable_keys = self._durable_keys()
        snapshot = [[k, e.to_dict()] for k, e in self._fast.items()]
        try:
            footprint = len(json.dumps(snapshot, default=repr))
        except (TypeError, ValueError):
            footprint = len(repr(snapshot))
        return CacheStats(
            size=len(self._fast),
            durable_size=len(durable_keys),
            keys=sorted(set(self._fast) | set(durable_keys)),
            approximate_memory_footprint=footprint,
        )

    def fast_keys(self) -> list[str]:
        return list(self._fast)

    def peek(self, key: str) -> CacheEntry[Any] | None:
        """Fast-tier entry for key, expired or not, without side effects."""
        return self._fast.get(key)
