"""tiercache caching system.

This package provides pluggable cache backends and the tiered cache that
coordinates them.

Available backends:
- MemoryCache: Fast in-process LRU cache, the usual first tier
- FileCache: Disk-backed cache surviving restarts
- RedisCache: Distributed Redis-backed cache (requires the 'redis' extra)
- TieredCache: Ordered tiers with promotion on read and fan-out on write

Quick Start:
    # Tiers built from descriptors, fastest first
    from tiercache.cache import TieredCache
    cache = TieredCache(
        {"backend": "memory", "max_size": 500},
        {"backend": "file", "root_dir": "/var/cache/app"},
    )

    # Or from pre-built handles
    from tiercache.cache import FileCache, MemoryCache
    cache = TieredCache(MemoryCache(max_size=500), FileCache("/var/cache/app"))

    value = await cache.get_or_set("user:123", load_user)
"""

from .base import CacheBackend, CacheStats
from .factory import (
    TierConfig,
    create_default_cache,
    create_tiered_cache,
    get_cache_backend,
    is_supported_backend,
    list_cache_backends,
    register_cache_backend,
    unregister_cache_backend,
)
from .file import FileCache
from .memory import MemoryCache
from .tiered import TieredCache

# Optional imports (only if Redis is installed)
try:
    import redis.asyncio  # type: ignore[import-not-found, import-untyped]  # noqa: F401

    from .redis import RedisCache

    _REDIS_AVAILABLE = True
except ImportError:
    _REDIS_AVAILABLE = False
    RedisCache = None  # type: ignore

__all__ = [
    # Base classes
    "CacheBackend",
    "CacheStats",
    # Backends
    "MemoryCache",
    "FileCache",
    "RedisCache",
    "TieredCache",
    # Configuration and factory functions
    "TierConfig",
    "get_cache_backend",
    "create_tiered_cache",
    "create_default_cache",
    "register_cache_backend",
    "unregister_cache_backend",
    "list_cache_backends",
    "is_supported_backend",
    # Constants
    "_REDIS_AVAILABLE",
]
