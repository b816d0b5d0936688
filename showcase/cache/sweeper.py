"""Periodic removal of expired cache entries."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math

from .manager import CacheManager

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5 * 60


class CacheSweeper:
    """Runs ``cache.cleanup()`` on a fixed interval, independent of reads."""

    def __init__(self, cache: CacheManager, interval: float = DEFAULT_INTERVAL_SECONDS):
        if not (interval > 0 and math.isfinite(interval)):
            raise ValueError(f"interval must be a positive number, got {interval!r}")
        self._cache = cache
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start sweeping on the running event loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("cache_sweeper_started", extra={"interval": self._interval})

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("cache_sweeper_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._cache.cleanup()
            except Exception as e:
                logger.error(
                    "cache_sweep_failed",
                    extra={"error_type": type(e).__name__, "error": str(e)},
                    exc_info=True,
                )

    async def __aenter__(self) -> CacheSweeper:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
