"""Tests for the two-tier CacheManager."""

import logging
import math

import pytest

from showcase.cache import CacheManager, MemoryStore


class TestSetGet:
    """Basic read/write behaviour."""

    def test_set_then_get_returns_value(self, cache, sample_products):
        cache.set("products", sample_products, 60)

        assert cache.get("products") == sample_products

    def test_missing_key_returns_none(self, cache):
        assert cache.get("nope") is None
        assert cache.has("nope") is False

    def test_last_write_wins(self, cache):
        cache.set("categories", ["v1"])
        cache.set("categories", ["v2"])

        assert cache.get("categories") == ["v2"]

    def test_default_ttl_is_used_when_omitted(self, cache):
        cache.set("products", [])

        entry = cache.peek("products")
        assert entry.expires_at - entry.created_at == 900

    def test_writes_both_tiers(self, cache, store):
        cache.set("product_42", {"id": 42})

        assert "product_42" in cache.fast_keys()
        assert store.get("cache_product_42") is not None

    @pytest.mark.parametrize("key", ["", None, 42])
    def test_rejects_invalid_key(self, cache, key):
        with pytest.raises(ValueError):
            cache.set(key, "value")

    @pytest.mark.parametrize("ttl", [0, -1, -900, math.nan, math.inf])
    def test_rejects_non_positive_ttl(self, cache, ttl):
        with pytest.raises(ValueError):
            cache.set("products", [], ttl)

        assert cache.get("products") is None

    @pytest.mark.parametrize("default_ttl", [0, math.nan, math.inf])
    def test_rejects_non_positive_default_ttl(self, default_ttl):
        with pytest.raises(ValueError):
            CacheManager(default_ttl=default_ttl)

    def test_fast_tier_only_without_store(self, clock):
        cache = CacheManager(clock=clock)
        cache.set("products", [1, 2])

        assert cache.get("products") == [1, 2]
        assert cache.get_stats().durable_size == 0


class TestExpiry:
    """TTL evaluation on access."""

    def test_value_expires_after_ttl(self, cache, clock, store):
        cache.set("products", [{"id": 1}], 900)

        clock.advance(901)

        assert cache.get("products") is None
        assert cache.has("products") is False
        assert cache.peek("products") is None
        assert store.get("cache_products") is None

    def test_value_still_live_at_exact_expiry(self, cache, clock):
        cache.set("products", [{"id": 1}], 900)

        clock.advance(900)

        assert cache.get("products") == [{"id": 1}]

    def test_storefront_scenario(self, cache, clock):
        cache.set("products", [{"id": 1}], 900)
        assert cache.get("products") == [{"id": 1}]

        clock.advance(901)
        assert cache.get("products") is None

    def test_nan_ttl_never_creates_an_immortal_entry(self, cache, clock):
        with pytest.raises(ValueError):
            cache.set("products", [1], math.nan)

        clock.advance(1e9)

        assert cache.get("products") is None


class TestDurableTier:
    """Promotion and persistence across process restarts."""

    def test_durable_hit_is_promoted(self, store, clock):
        CacheManager(store, clock=clock).set("categories", ["a", "b"], 600)

        restarted = CacheManager(store, clock=clock)
        assert restarted.peek("categories") is None

        assert restarted.get("categories") == ["a", "b"]
        assert restarted.peek("categories") is not None
        assert "categories" in restarted.fast_keys()

    def test_promoted_entry_keeps_original_expiry(self, store, clock):
        CacheManager(store, clock=clock).set("categories", ["a"], 600)
        clock.advance(300)

        restarted = CacheManager(store, clock=clock)
        restarted.get("categories")

        clock.advance(301)
        assert restarted.get("categories") is None

    def test_has_promotes_like_get(self, store, clock):
        CacheManager(store, clock=clock).set("featured_products", [1], 600)

        restarted = CacheManager(store, clock=clock)

        assert restarted.has("featured_products") is True
        assert "featured_products" in restarted.fast_keys()

    def test_expired_durable_entry_is_purged(self, store, clock):
        CacheManager(store, clock=clock).set("products", [1], 60)
        clock.advance(61)

        restarted = CacheManager(store, clock=clock)

        assert restarted.get("products") is None
        assert store.get("cache_products") is None

    def test_corrupt_payload_is_a_miss_and_purged(self, cache, store, caplog):
        store.set("cache_products", "{not json")

        with caplog.at_level(logging.WARNING):
            assert cache.get("products") is None

        assert store.get("cache_products") is None
        assert "cache_durable_payload_corrupted" in caplog.text

    def test_payload_without_timestamps_is_a_miss(self, cache, store):
        store.set("cache_products", '{"data": [1, 2]}')

        assert cache.get("products") is None
        assert store.get("cache_products") is None

    def test_write_failure_keeps_fast_tier(self, quota_store, clock, caplog):
        cache = CacheManager(quota_store, clock=clock)

        with caplog.at_level(logging.WARNING):
            cache.set("admin_analytics", {"visits": 10})

        assert cache.get("admin_analytics") == {"visits": 10}
        assert quota_store.keys() == []
        assert "cache_durable_write_failed" in caplog.text

    def test_broken_store_never_raises(self, broken_store, clock):
        cache = CacheManager(broken_store, clock=clock)

        cache.set("products", [1])
        assert cache.get("products") == [1]
        assert cache.has("missing") is False
        cache.delete("products")
        cache.set("categories", [2])
        cache.cleanup()
        stats = cache.get_stats()
        cache.clear()

        assert stats.keys == ["categories"]
        assert cache.get_stats().size == 0

    def test_unserializable_value_stays_in_fast_tier(self, cache, store, clock):
        cache.set("admin_dashboard_stats", {"orders": 1})
        assert store.get("cache_admin_dashboard_stats") is not None
        marker = object()

        cache.set("admin_dashboard_stats", marker)

        assert cache.get("admin_dashboard_stats") is marker
        assert store.get("cache_admin_dashboard_stats") is None
        assert CacheManager(store, clock=clock).get("admin_dashboard_stats") is None

    def test_rejected_write_drops_previous_durable_value(self, clock):
        store = MemoryStore(max_bytes=256)
        cache = CacheManager(store, clock=clock)
        cache.set("categories", ["v1"])

        cache.set("categories", ["x" * 500])

        assert cache.get("categories") == ["x" * 500]
        assert store.get("cache_categories") is None
        assert CacheManager(store, clock=clock).get("categories") is None

    def test_small_quota_degrades_to_fast_tier(self, clock):
        store = MemoryStore(max_bytes=64)
        cache = CacheManager(store, clock=clock)

        cache.set("products", ["x" * 200])

        assert cache.get("products") == ["x" * 200]
        assert store.get("cache_products") is None


class TestDeleteClear:
    """Explicit removal."""

    def test_delete_removes_both_tiers(self, cache, store, clock):
        cache.set("product_42", {"id": 42})

        cache.delete("product_42")

        assert cache.get("product_42") is None
        assert store.get("cache_product_42") is None
        assert CacheManager(store, clock=clock).get("product_42") is None

    def test_delete_missing_key_is_noop(self, cache):
        cache.delete("never_set")

    def test_clear_empties_everything(self, cache, store):
        cache.set("products", [1])
        cache.set("categories", [2])
        cache.set("product_1", {"id": 1})

        cache.clear()

        assert cache.get_stats().size == 0
        assert cache.get_stats().keys == []
        assert store.keys() == []

    def test_clear_keeps_foreign_durable_keys(self, cache, store):
        store.set("theme", "dark")
        cache.set("products", [1])

        cache.clear()

        assert store.keys() == ["theme"]


class TestCleanup:
    """Periodic sweep of expired entries."""

    def test_removes_only_expired(self, cache, clock, store):
        cache.set("stale", "old", 60)
        cache.set("fresh", "new", 3600)
        clock.advance(120)

        removed = cache.cleanup()

        assert removed == 1
        assert cache.fast_keys() == ["fresh"]
        assert store.keys() == ["cache_fresh"]

    def test_sweeps_durable_only_entries(self, store, clock):
        CacheManager(store, clock=clock).set("products", [1], 60)
        restarted = CacheManager(store, clock=clock)
        clock.advance(61)

        assert restarted.cleanup() == 0
        assert store.keys() == []

    def test_nothing_expired(self, cache):
        cache.set("products", [1])

        assert cache.cleanup() == 0
        assert cache.get("products") == [1]


class TestStats:
    """Introspection."""

    def test_reports_size_and_keys(self, cache):
        cache.set("products", [1])
        cache.set("categories", [2])

        stats = cache.get_stats()

        assert stats.size == 2
        assert stats.durable_size == 2
        assert stats.keys == ["categories", "products"]
        assert stats.approximate_memory_footprint > 0

    def test_includes_durable_only_keys(self, store, clock):
        CacheManager(store, clock=clock).set("product_reviews_7", [])

        stats = CacheManager(store, clock=clock).get_stats()

        assert stats.size == 0
        assert stats.keys == ["product_reviews_7"]

    def test_does_not_mutate(self, cache, clock):
        cache.set("products", [1], 10)
        clock.advance(20)

        cache.get_stats()

        assert cache.peek("products") is not None
        assert cache.get_stats().size == 1

    def test_footprint_handles_unserializable_values(self, cache):
        cache.set("weird", {1: object()})

        assert cache.get_stats().approximate_memory_footprint > 0
