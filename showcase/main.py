"""Composition root and cache warm-up entry point.

Run ``python -m showcase.main`` to preload critical storefront data into the
durable cache tier before the first page is served.
"""

import asyncio
import logging
import sys

import sentry_sdk

from showcase.cache import (
    CacheManager,
    CacheSweeper,
    MemoryStore,
    SqliteStore,
    TtlPolicy,
    preload_critical_data,
)
from showcase.config import Settings, get_settings
from showcase.supabase import SupabaseClient


def setup_logging() -> None:
    """Configure logging based on settings."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    # Reduce noise from libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_sentry() -> None:
    """Initialize Sentry SDK if DSN is configured."""
    settings = get_settings()
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
            send_default_pii=False,
        )
        logging.getLogger(__name__).info(
            f"Sentry initialized for environment: {settings.environment}"
        )


def build_store(settings: Settings) -> MemoryStore | SqliteStore:
    """Durable tier: SQLite file, or process memory when no path is set."""
    db_path = settings.cache_db
    if db_path is None:
        return MemoryStore()
    return SqliteStore(db_path, max_entries=settings.cache_max_entries)


def build_cache(settings: Settings, store: MemoryStore | SqliteStore | None = None) -> CacheManager:
    """Create the single cache instance shared by the whole process."""
    return CacheManager.from_settings(settings, store if store is not None else build_store(settings))


def build_sweeper(cache: CacheManager, settings: Settings) -> CacheSweeper:
    return CacheSweeper(cache, interval=settings.cache_cleanup_interval)


async def main() -> None:
    """Warm the cache with critical data and report what it holds."""
    setup_logging()
    setup_sentry()
    logger = logging.getLogger(__name__)

    settings = get_settings()
    store = build_store(settings)
    cache = build_cache(settings, store)
    ttl = TtlPolicy.from_settings(settings)

    try:
        async with SupabaseClient.from_settings(settings) as client, build_sweeper(cache, settings):
            tasks = preload_critical_data(cache, client, ttl)
            await asyncio.gather(*tasks)

        stats = cache.get_stats()
        logger.info(
            "cache_warmed",
            extra={
                "size": stats.size,
                "durable_size": stats.durable_size,
                "keys": stats.keys,
                "footprint": stats.approximate_memory_footprint,
            },
        )
    finally:
        if isinstance(store, SqliteStore):
            store.close()


if __name__ == "__main__":
    asyncio.run(main())
