"""Custom exception classes for tiercache.

All exceptions raised by the library derive from :class:`TierCacheError`,
so callers can catch the whole family with a single ``except`` clause.
"""

from typing import Any, Dict, Optional


class TierCacheError(Exception):
    """Base exception for all tiercache errors.

    Args:
        message: Human readable error message
        details: Optional structured context about the failure
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ConfigurationError(TierCacheError):
    """Raised when a cache or one of its tiers is misconfigured."""


class UnsupportedBackendError(ConfigurationError):
    """Raised when a cache handle belongs to an unregistered backend kind."""

    def __init__(self, backend_name: str, details: Optional[Dict[str, Any]] = None):
        self.backend_name = backend_name
        super().__init__(f"Unsupported cache backend: '{backend_name}'", details)


class InvalidHandleError(ConfigurationError):
    """Raised when a supplied tier is not a cache backend at all."""

    def __init__(self, value: Any, details: Optional[Dict[str, Any]] = None):
        self.value = value
        super().__init__(
            f"Not a cache backend: {type(value).__name__!s}", details
        )


class ProducerError(TierCacheError):
    """Failure of a ``get_or_set`` value producer.

    The coordinator lets the producer's own exception propagate unchanged,
    so this class is never raised by the library itself. Producers may raise
    it (or a subclass) to signal a failed computation in a way callers can
    tell apart from backend failures.
    """


class BackendError(TierCacheError):
    """Raised when a tier's ``get``/``set``/``delete``/``clear`` call fails.

    Args:
        message: Human readable error message
        tier: Index of the failing tier inside a tiered cache, if known
        operation: Name of the primitive that failed
        key: Cache key involved in the failed call, if any
        details: Optional additional context
    """

    def __init__(
        self,
        message: str,
        tier: Optional[int] = None,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.tier = tier
        self.operation = operation
        self.key = key
        merged = dict(details or {})
        if tier is not None:
            merged["tier"] = tier
        if operation is not None:
            merged["operation"] = operation
        if key is not None:
            merged["key"] = key
        super().__init__(message, merged)


__all__ = [
    "TierCacheError",
    "ConfigurationError",
    "UnsupportedBackendError",
    "InvalidHandleError",
    "ProducerError",
    "BackendError",
]
