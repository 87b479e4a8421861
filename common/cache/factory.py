"""
Cache Store Factory
===================

Process-wide cache store selected from settings.

Version: 0.1.0
"""

from common.cache.base import CacheStore
from common.config import CacheBackend, settings
from common.logging import get_logger

logger = get_logger(__name__)

_store: CacheStore | None = None


def get_cache_store() -> CacheStore:
    """
    Get the cache store for the configured backend.

    Returns:
        CacheStore instance (created on first use)
    """
    global _store

    if _store is None:
        backend = settings.cache.backend
        ttl = settings.cache.ttl_seconds

        if backend == CacheBackend.FILE:
            from common.cache.file import FileCacheStore

            _store = FileCacheStore(settings.cache.directory, ttl_seconds=ttl)
        elif backend == CacheBackend.MEMORY:
            from common.cache.memory import InMemoryCacheStore

            _store = InMemoryCacheStore(ttl_seconds=ttl)
        elif backend == CacheBackend.REDIS:
            from common.cache.redis import RedisCacheStore

            _store = RedisCacheStore.from_url(
                settings.redis.url,
                key_prefix=settings.redis.key_prefix,
                ttl_seconds=ttl,
            )
        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        logger.info(
            "cache_store_initialized",
            backend=backend.value,
            ttl_seconds=ttl,
        )

    return _store


def set_cache_store(store: CacheStore) -> None:
    """
    Set a custom cache store.

    Args:
        store: CacheStore instance
    """
    global _store
    _store = store
    logger.info("cache_store_set", backend=store.backend)


def reset_cache_store() -> None:
    """Reset the store to be re-initialized."""
    global _store
    _store = None
