"""
File Cache Store
================

One JSON file per cached proof result, named after the fingerprint.

Version: 0.1.0
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from common.cache.base import CacheEntry, CacheStore
from common.logging import get_logger

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class FileCacheStore(CacheStore):
    """
    Directory-backed cache store.

    Each entry is written to ``<directory>/<key>.json`` as
    ``{"data": ..., "cachedAt": ...}``. The directory is created on
    construction if absent. Nothing is ever deleted.
    """

    def __init__(self, directory: str | Path, ttl_seconds: int | None = None) -> None:
        """
        Initialize the store.

        Args:
            directory: Cache directory
            ttl_seconds: Optional TTL; expired entries read as absent
        """
        self.directory = Path(directory)
        self.ttl_seconds = ttl_seconds
        self.directory.mkdir(parents=True, exist_ok=True)

        logger.debug("file_cache_initialized", directory=str(self.directory))

    @property
    def backend(self) -> str:
        return "file"

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> CacheEntry | None:
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        return CacheEntry.from_json(key, raw)

    def _write(self, entry: CacheEntry) -> None:
        path = self._path(entry.key)
        # One staging file per writer; concurrent puts on a key race to the
        # final replace and the last one wins.
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.directory,
            prefix=f".{entry.key}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp.write(entry.to_json())
        tmp_path = Path(tmp.name)
        try:
            os.replace(tmp_path, path)
        finally:
            # Cleanup when the replace failed
            if tmp_path.exists():
                tmp_path.unlink()

    async def get(self, key: str) -> CacheEntry | None:
        entry = await asyncio.to_thread(self._read, key)
        if entry is None:
            return None
        if entry.is_expired(self.ttl_seconds):
            logger.debug("cache_entry_expired", key=key)
            return None
        return entry

    async def put(self, key: str, data: dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(key=key, data=data)
        await asyncio.to_thread(self._write, entry)
        logger.debug("cache_entry_written", key=key, backend=self.backend)
        return entry

    async def health_check(self) -> dict[str, Any]:
        writable = os.access(self.directory, os.W_OK)
        return {
            "status": "healthy" if writable else "unhealthy",
            "backend": self.backend,
            "directory": str(self.directory),
        }
