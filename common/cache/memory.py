"""
In-Memory Cache Store
=====================

Dictionary-backed store for development and testing.
Data is lost on restart.

Version: 0.1.0
"""

from typing import Any

from common.cache.base import CacheEntry, CacheStore


class InMemoryCacheStore(CacheStore):
    """In-memory cache store."""

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, CacheEntry] = {}

    @property
    def backend(self) -> str:
        return "memory"

    async def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self.ttl_seconds):
            return None
        return entry

    async def put(self, key: str, data: dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(key=key, data=data)
        self._entries[key] = entry
        return entry

    def clear_all(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
