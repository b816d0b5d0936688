"""Two-tier TTL cache package.

- manager.py: CacheManager (fast + durable tiers, preload, cleanup, stats)
- entry.py: CacheEntry
- codec.py: payload serialization for the durable tier
- stores.py: durable stores (memory, SQLite) and StoreResult
- keys.py: key naming convention and TTL tiers
- invalidation.py: group invalidation helpers
- preload.py: background warm-up of critical data
- sweeper.py: periodic expiry sweep
"""

from .codec import Codec, CodecError, JsonCodec
from .entry import CacheEntry
from .invalidation import CacheInvalidator, clear_user_cache
from .keys import CacheKeys, TtlPolicy
from .manager import CacheManager, CacheStats
from .preload import preload_critical_data
from .stores import (
    DurableStore,
    MemoryStore,
    SqliteStore,
    StoreError,
    StoreFullError,
    StoreResult,
)
from .sweeper import CacheSweeper

__all__ = [
    # Core
    "CacheManager",
    "CacheStats",
    "CacheEntry",
    # Serialization
    "Codec",
    "CodecError",
    "JsonCodec",
    # Durable stores
    "DurableStore",
    "MemoryStore",
    "SqliteStore",
    "StoreError",
    "StoreFullError",
    "StoreResult",
    # Conventions
    "CacheKeys",
    "TtlPolicy",
    # Helpers
    "CacheInvalidator",
    "clear_user_cache",
    "preload_critical_data",
    "CacheSweeper",
]
