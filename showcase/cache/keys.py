"""Cache key naming convention and TTL tiers.

Keys are ``<resource>`` or ``<resource>_<id>``. The cache itself treats them
as opaque; invalidation helpers rely on these prefixes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import Settings


class CacheKeys:
    """Keys for every cached resource."""

    # Storefront
    PRODUCTS = "products"
    CATEGORIES = "categories"
    FEATURED_PRODUCTS = "featured_products"

    # Admin
    ADMIN_PRODUCTS = "admin_products"
    ADMIN_CATEGORIES = "admin_categories"
    ADMIN_REVIEWS = "admin_reviews"
    ADMIN_CONTACTS = "admin_contacts"
    ADMIN_SUBSCRIBERS = "admin_subscribers"
    ADMIN_INVENTORY = "admin_inventory"
    ADMIN_ANALYTICS = "admin_analytics"
    ADMIN_DASHBOARD_STATS = "admin_dashboard_stats"

    # Per-id families
    PRODUCT_REVIEWS_PREFIX = "product_reviews_"
    RELATED_PRODUCTS_PREFIX = "related_products_"
    CATEGORY_PRODUCTS_PREFIX = "category_products_"

    @staticmethod
    def product_detail(product_id: str) -> str:
        return f"product_{product_id}"

    @classmethod
    def product_reviews(cls, product_id: str) -> str:
        return f"{cls.PRODUCT_REVIEWS_PREFIX}{product_id}"

    @classmethod
    def related_products(cls, category_id: str) -> str:
        return f"{cls.RELATED_PRODUCTS_PREFIX}{category_id}"

    @classmethod
    def category_products(cls, category_id: str) -> str:
        return f"{cls.CATEGORY_PRODUCTS_PREFIX}{category_id}"


@dataclass(frozen=True)
class TtlPolicy:
    """TTL tiers in seconds."""

    short: float = 5 * 60
    medium: float = 15 * 60
    long: float = 30 * 60
    very_long: float = 2 * 60 * 60

    @classmethod
    def from_settings(cls, settings: Settings) -> TtlPolicy:
        return cls(
            short=settings.cache_ttl_short,
            medium=settings.cache_ttl_medium,
            long=settings.cache_ttl_long,
            very_long=settings.cache_ttl_very_long,
        )
