"""Base cache interface and statistics.

Every cache tier implements :class:`CacheBackend`. The contract is kept
deliberately small (get/set/delete/clear/exists) so that any store, a
tiered cache included, can be used as a tier.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CacheStats:
    """Simple hit/miss/set/delete counters for a cache backend."""

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_set(self) -> None:
        self.sets += 1

    def record_delete(self) -> None:
        self.deletes += 1

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups that were hits (0.0 when nothing was read)."""
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def reset(self) -> None:
        """Reset all counters to zero."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "hit_rate": self.hit_rate,
        }


class CacheBackend(ABC):
    """Abstract base class for cache backends.

    ``None`` is the absence signal: ``get`` returns ``None`` for a missing
    key and any other value, falsy ones included, for a present key.

    Subclasses set ``backend_name`` to the name they are registered under
    in the backend registry (see :mod:`tiercache.cache.factory`).
    """

    backend_name: str = ""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Retrieve a value, or ``None`` if the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> Any:
        """Store a value, overwriting any previous one.

        Args:
            key: Cache key
            value: Value to store
            ttl: Optional time-to-live in seconds (backend-specific default)
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key. Deleting an absent key is a no-op."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry owned by this backend."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a key is present."""

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Return backend statistics as a dictionary."""

    async def remove(self, key: str) -> None:
        """Alias for :meth:`delete`."""
        await self.delete(key)

    async def close(self) -> None:
        """Release any resources held by the backend."""
        return None
