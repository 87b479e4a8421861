"""
Redis Cache Store
=================

Async Redis backend for deployments running more than one relay instance.

Version: 0.1.0
"""

import time
from typing import Any

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from common.cache.base import CacheEntry, CacheStore
from common.logging import get_logger

logger = get_logger(__name__)


class RedisCacheStore(CacheStore):
    """
    Redis-backed cache store.

    Entries are stored as the same JSON document the file backend writes.
    When a TTL is configured it is applied natively with ``SET ... EX``.
    """

    def __init__(
        self,
        client: Redis,  # type: ignore[type-arg]
        key_prefix: str = "proof-cache:",
        ttl_seconds: int | None = None,
    ) -> None:
        self._client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(
        cls,
        url: str,
        key_prefix: str = "proof-cache:",
        ttl_seconds: int | None = None,
    ) -> "RedisCacheStore":
        """Create a store with its own connection pool."""
        client = aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
        logger.info("redis_cache_created")
        return cls(client, key_prefix=key_prefix, ttl_seconds=ttl_seconds)

    @property
    def backend(self) -> str:
        return "redis"

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> CacheEntry | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        return CacheEntry.from_json(key, raw)

    async def put(self, key: str, data: dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(key=key, data=data)
        await self._client.set(self._key(key), entry.to_json(), ex=self.ttl_seconds)
        return entry

    async def close(self) -> None:
        """Close the client and release all connections."""
        await self._client.aclose()
        logger.info("redis_cache_closed")

    async def health_check(self) -> dict[str, Any]:
        try:
            start = time.perf_counter()
            pong = await self._client.ping()
            latency_ms = (time.perf_counter() - start) * 1000
            return {
                "status": "healthy" if pong else "unhealthy",
                "backend": self.backend,
                "latency_ms": round(latency_ms, 2),
            }
        except RedisError as e:
            logger.error("redis_health_check_failed", error=str(e))
            return {
                "status": "unhealthy",
                "backend": self.backend,
                "error": str(e),
            }
