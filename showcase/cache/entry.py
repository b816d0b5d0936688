"""Cache entry with creation and expiry timestamps."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Single cached value. Timestamps are epoch seconds."""

    data: T
    created_at: float
    expires_at: float

    @classmethod
    def create(cls, data: T, now: float, ttl: float) -> CacheEntry[T]:
        """Build an entry that lives for ``ttl`` seconds from ``now``."""
        if not (ttl > 0 and math.isfinite(ttl)):
            raise ValueError(f"ttl must be a positive number, got {ttl!r}")
        return cls(data=data, created_at=now, expires_at=now + ttl)

    def is_expired(self, now: float) -> bool:
        """Entry is still live at exactly ``expires_at``."""
        return now > self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> CacheEntry[Any]:
        """Rebuild an entry from its durable payload.

        Raises:
            ValueError: payload is not a mapping or timestamps are missing/invalid
        """
        if not isinstance(raw, dict) or "data" not in raw:
            raise ValueError("cache payload must be a mapping with a 'data' field")
        try:
            created_at = float(raw["created_at"])
            expires_at = float(raw["expires_at"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid cache timestamps: {e}") from e
        if not (math.isfinite(created_at) and math.isfinite(expires_at)):
            raise ValueError("cache timestamps must be finite")
        if expires_at <= created_at:
            raise ValueError("cache payload expires before it was created")
        return cls(data=raw["data"], created_at=created_at, expires_at=expires_at)
