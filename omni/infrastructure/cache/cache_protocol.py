"""Cache protocol for the data-access layer (DIP). Implemented by CacheService."""

from typing import Any, Final, Protocol


class _Missing:
    """Type of the MISSING sentinel."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()
"""Returned by get() when a key is absent, expired, undecodable or the cache is down.

Distinguishable from a stored None.
"""


class CacheProtocol(Protocol):
    """Protocol for cache backends (e.g. Redis). Every method fails open."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str, as_type: type | None = None) -> Any:
        """Return cached value (decoded into as_type when given) or MISSING."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store value with TTL in seconds. Returns False on failure."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True only if a key was removed."""
        ...

    async def exists(self, key: str) -> bool:
        """Return True if key holds an unexpired entry."""
        ...

    async def flush(self) -> bool:
        """Remove every key in the cache namespace. Operator tooling only."""
        ...

    async def ping(self) -> bool:
        """Return True if the backend answers a liveness check."""
        ...
