"""
Proof Cache Module
==================

Storage abstraction for proof results keyed by request fingerprint.

Backends:
- file (default): one JSON file per entry
- memory: development and testing
- redis: shared cache across instances

Usage:
    from common.cache import fingerprint, get_cache_store

    store = get_cache_store()
    key = fingerprint(api_key, "BTCUSDT", 123)

    entry = await store.get(key)
    if entry is None:
        await store.put(key, {"transformedProof": ..., "proof": ...})
"""

from common.cache.base import CacheCorruptedError, CacheEntry, CacheStore, fingerprint
from common.cache.factory import get_cache_store, reset_cache_store, set_cache_store
from common.cache.file import FileCacheStore
from common.cache.memory import InMemoryCacheStore

__all__ = [
    # Store
    "CacheStore",
    "get_cache_store",
    "set_cache_store",
    "reset_cache_store",
    # Models
    "CacheEntry",
    "CacheCorruptedError",
    "fingerprint",
    # Implementations
    "FileCacheStore",
    "InMemoryCacheStore",
]
