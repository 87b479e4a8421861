"""
Proof Cache Interface
=====================

Abstract store and models for cached proof results.

Entries are keyed by a fingerprint of (api key, symbol, order id) and are
never invalidated unless a TTL policy is configured explicitly. Growth is
unbounded; operators own the storage lifecycle.

Version: 0.1.0
"""

import hashlib
import json
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class CacheCorruptedError(ValueError):
    """A stored cache entry exists but cannot be parsed."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Cache entry {key} is corrupted: {reason}")


class CacheEntry(BaseModel):
    """A cached proof result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(..., exclude=True)
    data: dict[str, Any]
    cached_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        alias="cachedAt",
    )

    def is_expired(self, ttl_seconds: int | None, now: datetime | None = None) -> bool:
        """Check the entry against an optional TTL policy."""
        if ttl_seconds is None:
            return False
        now = now or datetime.now(UTC)
        return now - self.cached_at > timedelta(seconds=ttl_seconds)

    def to_json(self) -> str:
        """Serialize as stored: ``{"data": ..., "cachedAt": ...}``."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, key: str, raw: str | bytes) -> "CacheEntry":
        """
        Parse a stored entry.

        Raises:
            CacheCorruptedError: If the payload is not a valid entry
        """
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CacheCorruptedError(key, str(e)) from e

        if not isinstance(payload, dict):
            raise CacheCorruptedError(key, "expected a JSON object")

        try:
            return cls.model_validate({**payload, "key": key})
        except ValidationError as e:
            raise CacheCorruptedError(key, str(e)) from e


def fingerprint(api_key: str, symbol: str, order_id: str | int) -> str:
    """
    Derive the cache key for a trade proof request.

    SHA-256 over ``api_key:symbol:order_id``; the separator keeps
    ("ab", "c") and ("a", "bc") apart.
    """
    material = f"{api_key}:{symbol}:{order_id}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class CacheStore(ABC):
    """
    Abstract base class for proof cache stores.

    Implements the Strategy pattern for different storage backends.
    """

    @property
    @abstractmethod
    def backend(self) -> str:
        """Name of the storage backend."""
        ...

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """
        Read an entry.

        Returns:
            The entry, or None if absent

        Raises:
            CacheCorruptedError: If stored data is malformed
        """
        ...

    @abstractmethod
    async def put(self, key: str, data: dict[str, Any]) -> CacheEntry:
        """Store ``data`` under ``key`` stamped with the current time, overwriting."""
        ...

    async def health_check(self) -> dict[str, Any]:
        """Report store health."""
        return {"status": "healthy", "backend": self.backend}
