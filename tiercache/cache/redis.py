"""Redis cache backend implementation.

This module provides a Redis-backed cache for distributed deployments,
typically the slowest and largest tier, shared across application instances.
"""

import logging
import os
import pickle
from typing import Any, Dict, Optional

from ..exceptions import BackendError
from .base import CacheBackend, CacheStats

logger = logging.getLogger(__name__)


class RedisCache(CacheBackend):
    """Redis-backed cache implementation for distributed caching.

    Features:
    - Distributed cache shared across instances
    - Persistence across restarts
    - Automatic TTL expiration
    - Lazily opened connection (no I/O at construction)

    Errors talking to Redis are raised as :class:`BackendError` so that a
    tiered cache surfaces them instead of treating them as misses.
    """

    backend_name = "redis"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl: Optional[int] = None,
        prefix: str = "tiercache:",
        **redis_kwargs,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (uses TIERCACHE_REDIS_URL env if not provided)
            ttl: Default TTL in seconds (uses TIERCACHE_REDIS_TTL env if not provided)
            prefix: Key prefix for namespacing (default: "tiercache:")
            **redis_kwargs: Additional arguments passed to Redis client
        """
        try:
            import redis.asyncio  # type: ignore[import-not-found, import-untyped]  # noqa: F401
        except ImportError:
            raise ImportError(
                "Redis support requires 'redis' package. "
                "Install with: pip install tiercache[redis]"
            )

        self.redis_url = redis_url or os.getenv(
            "TIERCACHE_REDIS_URL", "redis://localhost:6379"
        )

        self.default_ttl = ttl or int(os.getenv("TIERCACHE_REDIS_TTL", "3600"))
        self.prefix = prefix
        self._stats = CacheStats()
        self._client = None
        self._redis_kwargs = redis_kwargs

    async def _get_client(self):
        """Get or create Redis client."""
        if self._client is None:
            import redis.asyncio  # type: ignore[import-not-found, import-untyped]

            self._client = redis.asyncio.from_url(
                self.redis_url,
                decode_responses=False,  # values are pickled bytes
                **self._redis_kwargs,
            )
        return self._client

    def _make_key(self, key: str) -> str:
        """Create prefixed cache key.

        Args:
            key: Original cache key

        Returns:
            Prefixed key for Redis
        """
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Retrieve value from Redis cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found, None otherwise

        Raises:
            BackendError: If Redis cannot be reached or the payload is corrupt
        """
        try:
            client = await self._get_client()
            data = await client.get(self._make_key(key))
            value = pickle.loads(data) if data is not None else None
        except Exception as e:
            logger.warning(f"Redis get error for key {key!r}: {e}")
            raise BackendError(
                f"Redis get error: {e}", operation="get", key=key
            ) from e

        if data is None:
            self._stats.record_miss()
            return None

        self._stats.record_hit()
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> Any:
        """Store value in Redis cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds (uses default if not provided)
        """
        try:
            client = await self._get_client()
            data = pickle.dumps(value)
            await client.setex(self._make_key(key), ttl or self.default_ttl, data)
        except Exception as e:
            logger.warning(f"Redis set error for key {key!r}: {e}")
            raise BackendError(
                f"Redis set error: {e}", operation="set", key=key
            ) from e

        self._stats.record_set()
        return value

    async def delete(self, key: str) -> None:
        """Delete value from Redis cache.

        Args:
            key: Cache key to delete
        """
        try:
            client = await self._get_client()
            deleted = await client.delete(self._make_key(key))
        except Exception as e:
            logger.warning(f"Redis delete error for key {key!r}: {e}")
            raise BackendError(
                f"Redis delete error: {e}", operation="delete", key=key
            ) from e

        if deleted:
            self._stats.record_delete()

    async def clear(self) -> None:
        """Clear all entries with this cache's prefix."""
        await self.invalidate_pattern("*")
        self._stats.reset()

    async def exists(self, key: str) -> bool:
        """Check if key exists in Redis cache.

        Args:
            key: Cache key to check

        Returns:
            True if key exists, False otherwise
        """
        try:
            client = await self._get_client()
            return bool(await client.exists(self._make_key(key)))
        except Exception as e:
            raise BackendError(
                f"Redis exists error: {e}", operation="exists", key=key
            ) from e

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        stats = self._stats.to_dict()
        stats["backend"] = self.backend_name
        stats["redis_url"] = self.redis_url
        stats["prefix"] = self.prefix
        return stats

    async def close(self) -> None:
        """Close Redis connection and cleanup resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        """Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            client = await self._get_client()
            await client.ping()
            return True
        except Exception:
            return False

    async def invalidate_pattern(self, pattern: str) -> int:
        """Invalidate all keys matching a pattern.

        Args:
            pattern: Redis pattern (e.g., "user:*", "session:123:*")

        Returns:
            Number of keys deleted
        """
        try:
            client = await self._get_client()
            full_pattern = f"{self.prefix}{pattern}"
            cursor = 0
            deleted = 0

            while True:
                cursor, keys = await client.scan(cursor, match=full_pattern, count=100)
                if keys:
                    await client.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break

            return deleted
        except Exception as e:
            logger.warning(f"Redis invalidate_pattern error for {pattern!r}: {e}")
            raise BackendError(
                f"Redis invalidate_pattern error: {e}", operation="clear"
            ) from e
