"""Infrastructure exceptions for the relational store and the cache.

They extend OmniException so the HTTP shell can map them to responses
consistently.
"""

from omni.domain.exceptions import OmniException


class TransportException(OmniException):
    """Relational store unreachable or timed out. Fatal to the operation."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Storage transport error during {operation}: {reason}",
            "TRANSPORT_ERROR",
            {"operation": operation, "reason": reason},
        )


class CacheSerializationError(OmniException):
    """A cached value could not be encoded or decoded.

    Raised by the cache codec and absorbed by CacheService (treated as a miss).
    """

    def __init__(self, type_name: str, reason: str) -> None:
        super().__init__(
            f"Cannot (de)serialize {type_name} for cache: {reason}",
            "CACHE_SERIALIZATION_ERROR",
            {"type": type_name, "reason": reason},
        )
