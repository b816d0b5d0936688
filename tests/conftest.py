"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before importing app modules
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test_anon_key")
os.environ.setdefault("SENTRY_DSN", "")

from showcase.cache import CacheManager, MemoryStore, StoreError, StoreFullError  # noqa: E402


class FakeClock:
    """Manually advanced clock in epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class QuotaExceededStore(MemoryStore):
    """Durable store that rejects every write."""

    def set(self, key: str, value: str) -> None:
        raise StoreFullError("quota exceeded")


class BrokenStore:
    """Durable store where every operation fails (storage disabled)."""

    def get(self, key: str) -> str | None:
        raise StoreError("storage disabled")

    def set(self, key: str, value: str) -> None:
        raise StoreError("storage disabled")

    def delete(self, key: str) -> None:
        raise StoreError("storage disabled")

    def keys(self) -> list[str]:
        raise StoreError("storage disabled")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def quota_store() -> QuotaExceededStore:
    return QuotaExceededStore()


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


@pytest.fixture
def cache(store: MemoryStore, clock: FakeClock) -> CacheManager:
    """Fresh cache per test, durable tier in memory."""
    return CacheManager(store, default_ttl=900, clock=clock)


@pytest.fixture
def sample_products() -> list[dict]:
    return [
        {
            "id": "p-1",
            "name": "Walnut Desk",
            "price": 420.0,
            "category_id": "c-1",
            "featured": True,
            "stock_quantity": 5,
        },
        {
            "id": "p-2",
            "name": "Oak Shelf",
            "price": 120.0,
            "category_id": "c-1",
            "featured": False,
            "stock_quantity": 0,
        },
    ]


@pytest.fixture
def sample_categories() -> list[dict]:
    return [
        {"id": "c-1", "name": "Furniture", "description": "", "image_url": ""},
        {"id": "c-2", "name": "Lighting", "description": "", "image_url": ""},
    ]
