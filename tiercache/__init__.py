"""
tiercache - Async multi-tier cache coordinator.

tiercache puts an ordered list of cache backends, fastest first, behind a
single cache interface. Reads probe the tiers in order and promote a value
found in a slower tier into every faster one; writes and deletes fan out to
every tier.

Main Exports (Import from top level):
    Cache:
        - TieredCache: The tier coordinator
        - CacheBackend: Backend interface every tier implements
        - MemoryCache, FileCache, RedisCache: Built-in backends
        - TierConfig: Tier configuration descriptor
        - get_cache_backend: Backend factory function
        - create_default_cache: Tiered cache built from environment

    Modules:
        - exceptions: Custom exception classes

Example:
    >>> from tiercache import TieredCache
    >>>
    >>> cache = TieredCache("memory", {"backend": "file", "root_dir": "/tmp/c"})
    >>> value = await cache.get_or_set("report:42", build_report)
"""

__version__ = "0.1.0"

# Modules
from . import exceptions
from .cache import (
    CacheBackend,
    CacheStats,
    FileCache,
    MemoryCache,
    RedisCache,
    TierConfig,
    TieredCache,
    create_default_cache,
    create_tiered_cache,
    get_cache_backend,
    register_cache_backend,
)
from .exceptions import (
    BackendError,
    ConfigurationError,
    InvalidHandleError,
    ProducerError,
    TierCacheError,
    UnsupportedBackendError,
)

__all__ = [
    "__version__",
    "exceptions",
    # Cache
    "TieredCache",
    "CacheBackend",
    "CacheStats",
    "MemoryCache",
    "FileCache",
    "RedisCache",
    "TierConfig",
    "get_cache_backend",
    "create_tiered_cache",
    "create_default_cache",
    "register_cache_backend",
    # Exceptions
    "TierCacheError",
    "ConfigurationError",
    "UnsupportedBackendError",
    "InvalidHandleError",
    "ProducerError",
    "BackendError",
]
