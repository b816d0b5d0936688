"""Get-or-fetch access to cached resources.

A CachedResource is what a page or admin view holds for one logical
resource: it reads through the cache, runs the fetcher on a miss and exposes
``data``/``loading``/``error`` for rendering.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Generic, TypeVar

from .cache import CacheKeys, CacheManager, TtlPolicy
from .monitoring import capture_exception
from .supabase import (
    SupabaseClient,
    fetch_categories,
    fetch_category_products,
    fetch_featured_products,
    fetch_product_detail,
    fetch_product_reviews,
    fetch_products,
    fetch_related_products,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CachedResource(Generic[T]):
    """Cache-backed view of one resource."""

    def __init__(
        self,
        cache: CacheManager,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: float | None = None,
        enabled: bool = True,
    ):
        self.cache = cache
        self.key = key
        self.enabled = enabled
        self._fetcher = fetcher
        self._ttl = ttl

        self.data: T | None = None
        self.loading: bool = False
        self.error: str | None = None

    async def load(self) -> T | None:
        """Serve from cache, or fetch and cache on a miss.

        Fetch failures are recorded in ``error`` and not raised.
        """
        if not self.enabled:
            self.loading = False
            return None

        self.error = None
        cached = self.cache.get(self.key)
        if cached is not None:
            self.data = cached
            self.loading = False
            return cached

        self.loading = True
        try:
            fresh = await self._fetcher()
            self.cache.set(self.key, fresh, self._ttl)
            self.data = fresh
        except Exception as e:
            self.error = str(e) or type(e).__name__
            capture_exception(e, {"cache_key": self.key})
        finally:
            self.loading = False

        return self.data

    async def refetch(self) -> T | None:
        """Evict and fetch fresh data."""
        self.cache.delete(self.key)
        return await self.load()

    def invalidate(self) -> None:
        """Evict without fetching."""
        self.cache.delete(self.key)
        self.data = None

    def __repr__(self) -> str:
        return (
            f"CachedResource(key={self.key!r}, loading={self.loading}, "
            f"has_data={self.data is not None}, error={self.error!r})"
        )


# =============================================================================
# Storefront resources
# =============================================================================


def products_resource(
    cache: CacheManager, client: SupabaseClient, ttl: TtlPolicy | None = None
) -> CachedResource[list[dict[str, Any]]]:
    ttl = ttl or TtlPolicy()
    return CachedResource(cache, CacheKeys.PRODUCTS, partial(fetch_products, client), ttl.medium)


def categories_resource(
    cache: CacheManager, client: SupabaseClient, ttl: TtlPolicy | None = None
) -> CachedResource[list[dict[str, Any]]]:
    ttl = ttl or TtlPolicy()
    return CachedResource(cache, CacheKeys.CATEGORIES, partial(fetch_categories, client), ttl.long)


def featured_products_resource(
    cache: CacheManager, client: SupabaseClient, ttl: TtlPolicy | None = None
) -> CachedResource[list[dict[str, Any]]]:
    ttl = ttl or TtlPolicy()
    return CachedResource(
        cache,
        CacheKeys.FEATURED_PRODUCTS,
        partial(fetch_featured_products, client),
        ttl.medium,
    )


def product_detail_resource(
    cache: CacheManager,
    client: SupabaseClient,
    product_id: str,
    ttl: TtlPolicy | None = None,
) -> CachedResource[dict[str, Any]]:
    """Disabled until a product id is known."""
    ttl = ttl or TtlPolicy()
    return CachedResource(
        cache,
        CacheKeys.product_detail(product_id),
        partial(fetch_product_detail, client, product_id),
        ttl.medium,
        enabled=bool(product_id),
    )


def product_reviews_resource(
    cache: CacheManager,
    client: SupabaseClient,
    product_id: str,
    ttl: TtlPolicy | None = None,
) -> CachedResource[list[dict[str, Any]]]:
    ttl = ttl or TtlPolicy()
    return CachedResource(
        cache,
        CacheKeys.product_reviews(product_id),
        partial(fetch_product_reviews, client, product_id),
        ttl.short,
        enabled=bool(product_id),
    )


def related_products_resource(
    cache: CacheManager,
    client: SupabaseClient,
    category_id: str,
    exclude_id: str | None = None,
    ttl: TtlPolicy | None = None,
) -> CachedResource[list[dict[str, Any]]]:
    ttl = ttl or TtlPolicy()
    return CachedResource(
        cache,
        CacheKeys.related_products(category_id),
        partial(fetch_related_products, client, category_id, exclude_id),
        ttl.medium,
        enabled=bool(category_id),
    )


def category_products_resource(
    cache: CacheManager,
    client: SupabaseClient,
    category_id: str,
    ttl: TtlPolicy | None = None,
) -> CachedResource[list[dict[str, Any]]]:
    """Catalogue page listing for one category, newest first."""
    ttl = ttl or TtlPolicy()
    return CachedResource(
        cache,
        CacheKeys.category_products(category_id),
        partial(fetch_category_products, client, category_id),
        ttl.medium,
        enabled=bool(category_id),
    )
