"""Application configuration using Pydantic Settings."""

import math
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote table store (Supabase REST)
    supabase_url: str
    supabase_anon_key: str
    supabase_timeout: float = 10.0

    # Cache storage
    cache_db_path: str = "data/cache.sqlite3"  # Empty string keeps the durable tier in memory
    cache_key_prefix: str = "cache_"
    cache_max_entries: int | None = None

    # Cache TTLs (seconds)
    cache_ttl_short: float = 5 * 60
    cache_ttl_medium: float = 15 * 60
    cache_ttl_long: float = 30 * 60
    cache_ttl_very_long: float = 2 * 60 * 60

    # Periodic sweep of expired entries (seconds)
    cache_cleanup_interval: float = 5 * 60

    # Application
    log_level: str = "INFO"

    # Monitoring (Sentry)
    sentry_dsn: str = ""
    environment: str = "production"

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended."""
        return v.strip().rstrip("/")

    @field_validator(
        "cache_ttl_short",
        "cache_ttl_medium",
        "cache_ttl_long",
        "cache_ttl_very_long",
        "cache_cleanup_interval",
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if not (v > 0 and math.isfinite(v)):
            raise ValueError("must be a finite number greater than zero")
        return v

    @property
    def cache_default_ttl(self) -> float:
        """TTL used when a caller does not pass one."""
        return self.cache_ttl_medium

    @property
    def cache_db(self) -> Path | None:
        """Path of the durable tier database, or None for an in-memory tier."""
        if not self.cache_db_path:
            return None
        return Path(self.cache_db_path)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
