"""Group invalidation on top of CacheManager.

Uses only ``get_stats().keys`` and ``delete``; the grouping knowledge lives
here, in the key naming convention from ``keys.py``.
"""

from __future__ import annotations

import logging

from .keys import CacheKeys
from .manager import CacheManager

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Named invalidation operations for each resource family."""

    def __init__(self, cache: CacheManager):
        self._cache = cache

    def _delete(self, *keys: str) -> None:
        for key in keys:
            self._cache.delete(key)

    def prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns count deleted."""
        matched = [k for k in self._cache.get_stats().keys if k.startswith(prefix)]
        self._delete(*matched)
        if matched:
            logger.debug(
                "cache_prefix_invalidated",
                extra={"prefix": prefix, "deleted_count": len(matched)},
            )
        return len(matched)

    def products(self) -> None:
        self._delete(
            CacheKeys.PRODUCTS,
            CacheKeys.FEATURED_PRODUCTS,
            CacheKeys.ADMIN_PRODUCTS,
        )

    def categories(self) -> None:
        self._delete(CacheKeys.CATEGORIES, CacheKeys.ADMIN_CATEGORIES)
        self.prefix(CacheKeys.CATEGORY_PRODUCTS_PREFIX)

    def reviews(self) -> None:
        self._delete(CacheKeys.ADMIN_REVIEWS)
        self.prefix(CacheKeys.PRODUCT_REVIEWS_PREFIX)

    def contacts(self) -> None:
        self._delete(CacheKeys.ADMIN_CONTACTS)

    def subscribers(self) -> None:
        self._delete(CacheKeys.ADMIN_SUBSCRIBERS)

    def inventory(self) -> None:
        self._delete(CacheKeys.ADMIN_INVENTORY)

    def analytics(self) -> None:
        self._delete(CacheKeys.ADMIN_ANALYTICS, CacheKeys.ADMIN_DASHBOARD_STATS)

    def all(self) -> None:
        self._cache.clear()


def clear_user_cache(cache: CacheManager) -> None:
    """Drop everything on logout so no per-user data outlives the session."""
    cache.clear()
    logger.info("user_cache_cleared")
