"""Serialization of cache entries for the durable tier."""

from __future__ import annotations

import json
from typing import Any, Protocol


class CodecError(Exception):
    """Payload could not be encoded or decoded."""


class Codec(Protocol):
    """Turns entry payloads into strings and back."""

    def encode(self, payload: dict[str, Any]) -> str: ...

    def decode(self, raw: str) -> dict[str, Any]: ...


class JsonCodec:
    """JSON codec. Only JSON-compatible payloads survive the durable tier."""

    def encode(self, payload: dict[str, Any]) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CodecError(f"payload is not JSON serializable: {e}") from e

    def decode(self, raw: str) -> dict[str, Any]:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CodecError(f"corrupt cache payload: {e}") from e
        if not isinstance(payload, dict):
            raise CodecError("cache payload must decode to an object")
        return payload
