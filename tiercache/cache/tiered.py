"""Tiered cache coordinator.

:class:`TieredCache` fronts an ordered list of cache backends, fastest
first, and exposes them as a single cache:

- reads probe the tiers in order and promote a hit found in a slower tier
  into every faster tier;
- writes and deletes fan out to every tier in order.

Tier calls are awaited one at a time, strictly in tier order. There is no
locking and no coalescing of concurrent misses: two concurrent
``get_or_set`` misses on the same key may both run the producer, and the
last write wins in each tier.

A failing tier call halts the operation: earlier tiers keep whatever was
already written to them, later tiers are not attempted, and the failure is
raised as :class:`~tiercache.exceptions.BackendError`.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from ..exceptions import BackendError, ConfigurationError
from .base import CacheBackend

logger = logging.getLogger(__name__)

Producer = Callable[[], Union[Any, Awaitable[Any]]]


class TieredCache(CacheBackend):
    """Multi-tier read-through/write-through cache.

    Args:
        *tiers: Tiers from fastest to slowest. Each is either a
            pre-built :class:`CacheBackend` or a configuration descriptor
            (a :class:`~tiercache.cache.factory.TierConfig`, a mapping with a
            ``backend`` key, or a bare backend name).

    Raises:
        ConfigurationError: If no tiers are given or a descriptor is malformed
        UnsupportedBackendError: If a handle's backend kind is not registered
        InvalidHandleError: If a tier is neither a handle nor a descriptor

    Example:
        >>> cache = TieredCache(
        ...     {"backend": "memory", "max_size": 500},
        ...     {"backend": "file", "root_dir": "/tmp/cache"},
        ... )
        >>> profile = await cache.get_or_set("user:123", load_profile)
    """

    backend_name = "tiered"

    def __init__(self, *tiers: Any):
        if not tiers:
            raise ConfigurationError(
                "TieredCache requires at least one tier",
                details={"tier_count": 0},
            )

        from .factory import resolve_tier

        self._tiers: Tuple[CacheBackend, ...] = tuple(
            resolve_tier(tier, index) for index, tier in enumerate(tiers)
        )

    @property
    def tiers(self) -> Tuple[CacheBackend, ...]:
        """The tier handles, fastest first."""
        return self._tiers

    def __len__(self) -> int:
        return len(self._tiers)

    def __repr__(self) -> str:
        names = ", ".join(tier.backend_name or type(tier).__name__ for tier in self._tiers)
        return f"TieredCache([{names}])"

    async def _call(self, index: int, operation: str, *args: Any) -> Any:
        """Invoke a primitive on one tier, normalizing failures to BackendError."""
        tier = self._tiers[index]
        key = args[0] if args else None
        try:
            return await getattr(tier, operation)(*args)
        except BackendError as e:
            # tier is relative to this cache; tier_path runs outermost to innermost
            e.details["tier_path"] = [index] + list(e.details.get("tier_path", []))
            e.tier = index
            e.details["tier"] = index
            logger.warning(f"Tier {index} {operation} failed for key {key!r}: {e}")
            raise
        except Exception as e:
            logger.warning(f"Tier {index} {operation} failed for key {key!r}: {e}")
            raise BackendError(
                f"Tier {index} ({tier.backend_name or type(tier).__name__}) "
                f"{operation} failed: {e}",
                tier=index,
                operation=operation,
                key=key,
                details={"tier_path": [index]},
            ) from e

    async def get(self, key: str) -> Optional[Any]:
        """Return the value from the first tier holding ``key``.

        Read-only: nothing is promoted and no tier is written. Returns
        ``None`` when no tier holds the key.
        """
        for index in range(len(self._tiers)):
            value = await self._call(index, "get", key)
            if value is not None:
                logger.debug(f"Hit for key {key!r} in tier {index}")
                return value
        return None

    async def get_or_set(self, key: str, producer: Producer) -> Any:
        """Return the cached value for ``key``, producing it on a full miss.

        On a hit in tier ``i`` the value is written into tiers ``i-1`` down
        to ``0`` and returned; tiers ``i`` and slower are left untouched. On
        a miss in every tier, ``producer`` is called exactly once (its
        result is awaited if it is awaitable) and the value is written to
        every tier.

        If the producer raises, no tier is written and its exception
        propagates unchanged.

        Args:
            key: Cache key
            producer: Zero-argument callable, sync or async, computing the value

        Returns:
            The cached or freshly produced value
        """
        for index in range(len(self._tiers)):
            value = await self._call(index, "get", key)
            if value is None:
                continue

            if index:
                logger.debug(
                    f"Promoting key {key!r} from tier {index} to tiers 0..{index - 1}"
                )
            for faster in range(index - 1, -1, -1):
                await self._call(faster, "set", key, value)
            return value

        value = producer()
        if inspect.isawaitable(value):
            value = await value

        logger.debug(f"Populating key {key!r} in all {len(self._tiers)} tiers")
        return await self.set(key, value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> Any:
        """Write ``value`` to every tier, fastest first, and return it.

        Args:
            key: Cache key
            value: Value to store
            ttl: Optional TTL forwarded to every tier
        """
        for index in range(len(self._tiers)):
            if ttl is None:
                await self._call(index, "set", key, value)
            else:
                await self._call(index, "set", key, value, ttl)
        return value

    async def delete(self, key: str) -> None:
        """Delete ``key`` from every tier. Absent keys are ignored."""
        for index in range(len(self._tiers)):
            await self._call(index, "delete", key)

    async def clear(self) -> None:
        """Clear every tier."""
        for index in range(len(self._tiers)):
            await self._call(index, "clear")

    async def exists(self, key: str) -> bool:
        """Check whether any tier holds ``key``."""
        for index in range(len(self._tiers)):
            if await self._call(index, "exists", key):
                return True
        return False

    def get_stats(self) -> Dict[str, Any]:
        """Collect statistics from every tier.

        Returns:
            Dictionary with the per-tier statistics, fastest first
        """
        return {
            "backend": self.backend_name,
            "tier_count": len(self._tiers),
            "tiers": [tier.get_stats() for tier in self._tiers],
        }

    async def close(self) -> None:
        """Close every tier."""
        for tier in self._tiers:
            await tier.close()

    async def __aenter__(self) -> "TieredCache":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
