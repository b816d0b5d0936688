"""Background warm-up of data every page needs."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING

from .keys import CacheKeys, TtlPolicy
from .manager import CacheManager

if TYPE_CHECKING:
    from ..supabase import SupabaseClient

logger = logging.getLogger(__name__)


def preload_critical_data(
    cache: CacheManager,
    client: SupabaseClient,
    ttl: TtlPolicy | None = None,
) -> list[asyncio.Task[None]]:
    """Schedule preloads of categories and featured products.

    Returns immediately. Keys already cached are skipped, so the returned
    list only holds tasks that were actually started.
    """
    from ..supabase import fetch_categories, fetch_featured_products

    ttl = ttl or TtlPolicy()
    scheduled = [
        cache.preload(CacheKeys.CATEGORIES, partial(fetch_categories, client), ttl.long),
        cache.preload(
            CacheKeys.FEATURED_PRODUCTS,
            partial(fetch_featured_products, client),
            ttl.medium,
        ),
    ]
    tasks = [t for t in scheduled if t is not None]
    logger.info("critical_preload_scheduled", extra={"tasks_count": len(tasks)})
    return tasks
