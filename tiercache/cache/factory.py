"""Cache factory with a registry of supported backend kinds.

The registry is the single source of truth for which backends may be used
as tiers: descriptors are built through it, and pre-built handles are
accepted only if their ``backend_name`` is registered.
"""

import os
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigurationError, InvalidHandleError, UnsupportedBackendError
from .base import CacheBackend
from .file import FileCache
from .memory import MemoryCache
from .tiered import TieredCache

# Registry for cache backend implementations
_CACHE_REGISTRY: Dict[str, Type[CacheBackend]] = {}
# Registry for cache configuration functions
_CACHE_CONFIGURATORS: Dict[str, Callable[[Dict[str, Any]], CacheBackend]] = {}


class TierConfig(BaseModel):
    """Configuration descriptor for one cache tier.

    Attributes:
        backend: Registered backend name ('memory', 'file', 'redis', ...)
        options: Keyword arguments for the backend's configurator
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: str = Field(..., min_length=1)
    options: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_descriptor(
        cls, descriptor: Union["TierConfig", Mapping[str, Any], str]
    ) -> "TierConfig":
        """Normalize a descriptor into a TierConfig.

        Mappings may carry backend options either under ``options`` or as
        top-level keys next to ``backend``; a bare string is a backend name.
        """
        if isinstance(descriptor, TierConfig):
            return descriptor
        if isinstance(descriptor, str):
            return cls(backend=descriptor)

        data = dict(descriptor)
        options = data.pop("options", None)
        config = cls(
            backend=data.pop("backend", None),
            options=options if options is not None else {},
        )
        if not data:
            return config
        return cls(backend=config.backend, options={**config.options, **data})


TierSpec = Union[CacheBackend, TierConfig, Mapping[str, Any], str]


def register_cache_backend(
    name: str,
    backend_class: Type[CacheBackend],
    configurator: Optional[Callable[[Dict[str, Any]], CacheBackend]] = None,
) -> None:
    """Register a cache backend implementation.

    Args:
        name: Backend name to register
        backend_class: Class implementing the CacheBackend interface
        configurator: Optional function building an instance from kwargs

    Raises:
        ConfigurationError: If the class is not a CacheBackend or the name is taken
    """
    if not (isinstance(backend_class, type) and issubclass(backend_class, CacheBackend)):
        raise ConfigurationError(
            f"Cache backend class {backend_class!r} must inherit from CacheBackend",
            details={"name": name},
        )

    if name in _CACHE_REGISTRY:
        raise ConfigurationError(
            f"Cache backend '{name}' is already registered", details={"name": name}
        )

    _CACHE_REGISTRY[name] = backend_class
    _CACHE_CONFIGURATORS[name] = configurator or (
        lambda kwargs: backend_class(**kwargs)
    )


def unregister_cache_backend(name: str) -> None:
    """Unregister a cache backend implementation.

    Args:
        name: Backend name to unregister
    """
    _CACHE_REGISTRY.pop(name, None)
    _CACHE_CONFIGURATORS.pop(name, None)


def list_cache_backends() -> Dict[str, Type[CacheBackend]]:
    """Get all registered cache backends.

    Returns:
        Dictionary mapping backend names to their classes
    """
    return _CACHE_REGISTRY.copy()


def is_supported_backend(handle: CacheBackend) -> bool:
    """Check whether a handle belongs to a registered backend kind."""
    backend_class = _CACHE_REGISTRY.get(handle.backend_name)
    return backend_class is not None and isinstance(handle, backend_class)


def get_cache_backend(
    backend: Optional[str] = None, cache_size: Optional[int] = None, **kwargs: Any
) -> CacheBackend:
    """Create a cache backend based on configuration.

    Args:
        backend: Registered backend name ('memory', 'file', 'redis', 'tiered').
                If None, reads from TIERCACHE_CACHE_BACKEND environment variable,
                defaulting to 'memory'.
        cache_size: Maximum entries for the memory backend; ignored by other backends.
        **kwargs: Additional backend-specific arguments

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If the backend is unknown or rejects its options

    Examples:
        # Use environment variables
        cache = get_cache_backend()

        # Explicit memory cache
        cache = get_cache_backend('memory', cache_size=1000)

        # Explicit Redis cache
        cache = get_cache_backend('redis', redis_url='redis://localhost:6379')
    """
    if backend is None:
        backend = os.getenv("TIERCACHE_CACHE_BACKEND", "").lower() or "memory"

    if backend not in _CACHE_REGISTRY:
        available = ", ".join(sorted(_CACHE_REGISTRY))
        raise ConfigurationError(
            f"Unknown cache backend: '{backend}'. Valid options: {available}",
            details={"backend": backend},
        )

    if backend == "memory" and cache_size is not None:
        kwargs.setdefault("max_size", cache_size)

    configurator = _CACHE_CONFIGURATORS[backend]
    try:
        return configurator(kwargs)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to configure cache backend '{backend}': {e}",
            details={"backend": backend, "kwargs": kwargs},
        ) from e


def resolve_tier(tier: Any, index: int = 0) -> CacheBackend:
    """Turn one tier argument into a validated cache backend.

    Args:
        tier: A CacheBackend handle or a configuration descriptor
        index: Position of the tier, for error details

    Raises:
        ConfigurationError: If a descriptor is malformed or names an unknown backend
        UnsupportedBackendError: If a handle's backend kind is not registered
        InvalidHandleError: If ``tier`` is neither a handle nor a descriptor
    """
    if isinstance(tier, CacheBackend):
        if not is_supported_backend(tier):
            raise UnsupportedBackendError(
                tier.backend_name or type(tier).__name__, details={"tier": index}
            )
        return tier

    if not isinstance(tier, (TierConfig, Mapping, str)):
        raise InvalidHandleError(tier, details={"tier": index})

    try:
        config = TierConfig.from_descriptor(tier)
    except ValidationError as e:
        raise ConfigurationError(
            f"Malformed configuration for tier {index}: {e}",
            details={"tier": index},
        ) from e

    return get_cache_backend(config.backend, **config.options)


def create_tiered_cache(tiers: Iterable[TierSpec]) -> TieredCache:
    """Build a TieredCache from an iterable of handles and descriptors."""
    return TieredCache(*tiers)


def create_default_cache() -> TieredCache:
    """Create the default tiered cache based on environment.

    Reads TIERCACHE_TIERS, a comma-separated list of backend names from
    fastest to slowest (default: "memory"). Each backend picks up its own
    environment settings.

    Returns:
        Configured TieredCache instance
    """
    names = [
        name.strip().lower()
        for name in os.getenv("TIERCACHE_TIERS", "memory").split(",")
        if name.strip()
    ]
    return TieredCache(*names)


def _register_builtin_backends() -> None:
    """Register built-in cache backend implementations."""

    def memory_configurator(kwargs: Dict[str, Any]) -> MemoryCache:
        return MemoryCache(**kwargs)

    def file_configurator(kwargs: Dict[str, Any]) -> FileCache:
        return FileCache(**kwargs)

    def tiered_configurator(kwargs: Dict[str, Any]) -> TieredCache:
        """Build a nested tiered cache from a ``tiers`` list."""
        tiers = kwargs.get("tiers")
        if not tiers:
            raise ConfigurationError(
                "Nested tiered cache requires a non-empty 'tiers' list"
            )
        return TieredCache(*tiers)

    register_cache_backend("memory", MemoryCache, memory_configurator)
    register_cache_backend("file", FileCache, file_configurator)
    register_cache_backend("tiered", TieredCache, tiered_configurator)

    # Register Redis only if the optional dependency is installed
    try:
        import redis.asyncio  # type: ignore[import-not-found, import-untyped]  # noqa: F401

        from .redis import RedisCache

        def redis_configurator(kwargs: Dict[str, Any]) -> RedisCache:
            extra = {
                k: v
                for k, v in kwargs.items()
                if k not in ("redis_url", "ttl", "prefix")
            }
            return RedisCache(
                redis_url=kwargs.get("redis_url"),
                ttl=kwargs.get("ttl"),
                prefix=kwargs.get("prefix", "tiercache:"),
                **extra,
            )

        register_cache_backend("redis", RedisCache, redis_configurator)
    except ImportError:
        pass


_register_builtin_backends()
