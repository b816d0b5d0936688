"""Tests for settings and the composition root."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from showcase.cache import CacheManager, MemoryStore, SqliteStore, TtlPolicy
from showcase.config import Settings
from showcase.main import build_cache, build_store, build_sweeper


def make_settings(**overrides) -> Settings:
    values = {
        "supabase_url": "https://test-project.supabase.co/",
        "supabase_anon_key": "anon",
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()

        assert settings.supabase_url == "https://test-project.supabase.co"
        assert settings.cache_default_ttl == settings.cache_ttl_medium == 900
        assert settings.cache_cleanup_interval == 300
        assert settings.cache_db == Path("data/cache.sqlite3")

    def test_empty_db_path_means_in_memory(self):
        assert make_settings(cache_db_path="").cache_db is None

    @pytest.mark.parametrize(
        "field", ["cache_ttl_short", "cache_ttl_medium", "cache_cleanup_interval"]
    )
    def test_rejects_non_positive_durations(self, field):
        with pytest.raises(ValidationError):
            make_settings(**{field: 0})

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_rejects_non_finite_durations(self, value):
        with pytest.raises(ValidationError):
            make_settings(cache_ttl_medium=value)

    def test_ttl_policy_from_settings(self):
        settings = make_settings(cache_ttl_short=1, cache_ttl_long=3)

        policy = TtlPolicy.from_settings(settings)

        assert policy.short == 1
        assert policy.medium == 900
        assert policy.long == 3


class TestCompositionRoot:
    def test_build_store_sqlite(self, tmp_path):
        store = build_store(make_settings(cache_db_path=str(tmp_path / "c.sqlite3")))

        assert isinstance(store, SqliteStore)

    def test_build_store_memory(self):
        assert isinstance(build_store(make_settings(cache_db_path="")), MemoryStore)

    def test_build_cache_uses_settings(self):
        settings = make_settings(cache_db_path="", cache_ttl_medium=120)

        cache = build_cache(settings)

        assert isinstance(cache, CacheManager)
        assert cache.default_ttl == 120
        cache.set("products", [1])
        assert cache.get("products") == [1]

    def test_build_sweeper(self):
        settings = make_settings(cache_db_path="")

        sweeper = build_sweeper(build_cache(settings), settings)

        assert not sweeper.is_running
