"""In-memory cache backend implementation.

This module provides a fast LRU cache living in the process memory,
the natural first tier of a tiered cache.
"""

import logging
import os
import time
from typing import Any, Dict, MutableMapping, Optional, Tuple

from .base import CacheBackend, CacheStats

logger = logging.getLogger(__name__)

# (value, expires_at); expires_at is a time.monotonic() deadline or None
_Entry = Tuple[Any, Optional[float]]


class MemoryCache(CacheBackend):
    """LRU in-memory cache.

    Features:
    - Least recently used eviction once ``max_size`` entries are held
    - Optional per-entry TTL
    - Optional externally owned ``datastore`` shared between instances

    Entries live in a mutable mapping. By default each instance owns a
    private dict; passing the same ``datastore`` to several instances makes
    them share contents, and the mapping outlives any single cache.

    Args:
        max_size: Maximum number of entries (uses TIERCACHE_CACHE_SIZE env if not provided)
        ttl: Default TTL in seconds, ``None`` for no expiration
        datastore: Optional shared mapping to store entries in
    """

    backend_name = "memory"

    def __init__(
        self,
        max_size: Optional[int] = None,
        ttl: Optional[int] = None,
        datastore: Optional[MutableMapping[str, _Entry]] = None,
    ):
        if max_size is None:
            max_size = int(os.getenv("TIERCACHE_CACHE_SIZE", "1000"))
        if max_size <= 0:
            raise ValueError("max_size must be a positive integer")

        self.max_size = max_size
        self.default_ttl = ttl
        self._store: MutableMapping[str, _Entry] = (
            datastore if datastore is not None else {}
        )
        self._stats = CacheStats()

    def _expired(self, entry: _Entry) -> bool:
        expires_at = entry[1]
        return expires_at is not None and time.monotonic() >= expires_at

    async def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            self._stats.record_miss()
            return None

        if self._expired(entry):
            self._store.pop(key, None)
            self._stats.record_miss()
            return None

        # Reinsert to mark as most recently used
        self._store.pop(key, None)
        self._store[key] = entry
        self._stats.record_hit()
        return entry[0]

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> Any:
        ttl_seconds = ttl if ttl is not None else self.default_ttl
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None

        self._store.pop(key, None)
        self._store[key] = (value, expires_at)
        self._stats.record_set()

        while len(self._store) > self.max_size:
            oldest = next(iter(self._store))
            self._store.pop(oldest, None)
            logger.debug(f"Evicted least recently used key {oldest!r}")

        return value

    async def delete(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._stats.record_delete()

    async def clear(self) -> None:
        self._store.clear()
        self._stats.reset()

    async def exists(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return False
        if self._expired(entry):
            self._store.pop(key, None)
            return False
        return True

    def get_stats(self) -> Dict[str, Any]:
        stats = self._stats.to_dict()
        stats["backend"] = self.backend_name
        stats["size"] = len(self._store)
        stats["max_size"] = self.max_size
        return stats
