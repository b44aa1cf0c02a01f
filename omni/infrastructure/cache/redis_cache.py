"""Redis-based cache service (the CacheStore of the data-access layer).

Provides async Redis caching with TTL support, JSON serialization of
read-models (see codec.py) and a configurable key namespace. Every failure
(transport, timeout, encode/decode) is absorbed here: get() degrades to
MISSING, writes return False. Callers never see a cache exception.

Values are stored in an envelope {"value", "ttl", "written_at"} so an entry
past its TTL reads as absent even when the server has not evicted it yet.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from omni.core.config import Settings, get_settings
from omni.infrastructure.cache.cache_protocol import MISSING
from omni.infrastructure.cache.codec import decode, encode
from omni.infrastructure.exceptions import CacheSerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNLINK_CHUNK_SIZE = 500


class CacheService:
    """Async Redis cache service with TTL support.

    Construct with settings (connection is made by connect()) or with an
    already-built client for testing or DI. The composition root calls
    connect() at startup and disconnect() at shutdown.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        redis_client: redis.Redis | None = None,
        *,
        log: logging.Logger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize cache service.

        Args:
            settings: Connection and namespace settings; defaults to get_settings().
            redis_client: Optional Redis client for testing or DI. Treated as connected.
            log: Logger to report hits, misses and failures to.
            clock: Epoch-seconds clock for envelope timestamps and reconnect backoff.
        """
        self.settings = settings or get_settings()
        self.redis = redis_client
        self.prefix = self.settings.cache_prefix
        self.logger = log or logger
        self._clock = clock
        self._owns_client = redis_client is None
        self._connected = redis_client is not None
        # Epoch time after which an owned, disconnected client may reconnect.
        # None until connect() has been called, and again after disconnect().
        self._retry_at: float | None = None

    async def connect(self) -> None:
        """Establish Redis connection.

        If Redis is unreachable the cache stays disabled and a reconnect is
        attempted lazily by the first operation after redis_retry_interval.
        """
        if self.redis is not None:
            return
        password = (
            self.settings.redis_password.get_secret_value()
            if self.settings.redis_password
            else None
        )
        client = redis.from_url(
            self.settings.redis_url,
            db=self.settings.redis_db,
            password=password,
            decode_responses=True,
            socket_connect_timeout=self.settings.redis_connect_timeout,
            socket_timeout=self.settings.redis_command_timeout,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            self.logger.warning(
                "Redis connection failed: %s. Cache disabled; retrying in %ss.",
                e,
                self.settings.redis_retry_interval,
            )
            await client.aclose()
            self._connected = False
            self._retry_at = self._clock() + self.settings.redis_retry_interval
            return
        self.redis = client
        self._owns_client = True
        self._connected = True
        self._retry_at = None
        self.logger.info("Redis cache connected (db=%s, prefix=%r)", self.settings.redis_db, self.prefix)

    async def disconnect(self) -> None:
        """Close Redis connection. Injected clients are left open for their owner."""
        if self.redis is not None and self._owns_client:
            await self.redis.aclose()
            self.logger.info("Redis cache disconnected")
        self.redis = None
        self._connected = False
        self._retry_at = None

    async def _reconnect(self) -> bool:
        """Attempt to reconnect an owned client. Returns True if reconnected."""
        if not self._owns_client:
            return False
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                self.logger.debug("Ignoring error while closing broken Redis client")
            self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def _reconnect_due(self) -> bool:
        return (
            self._owns_client
            and self.redis is None
            and self._retry_at is not None
            and self._clock() >= self._retry_at
        )

    def is_available(self) -> bool:
        """Return True if Redis is connected, or disconnected and due for a reconnect."""
        return (self._connected and self.redis is not None) or self._reconnect_due()

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def _run(
        self,
        op: str,
        key: str,
        call: Callable[[redis.Redis], Awaitable[T]],
        default: T,
    ) -> T:
        """Run one Redis call; on any Redis error log and return default.

        A disconnected owned client is reconnected first once its backoff has
        elapsed. Connection and timeout errors get one reconnect-and-retry.
        """
        if self._reconnect_due():
            await self._reconnect()
        if not self._connected or self.redis is None:
            return default
        try:
            return await call(self.redis)
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect() and self.redis is not None:
                try:
                    return await call(self.redis)
                except redis.RedisError:
                    self.logger.exception("Cache %s error for key %s after reconnect", op, key)
                    return default
            self.logger.warning("Cache %s unavailable for key %s (Redis disconnected)", op, key)
            return default
        except redis.RedisError:
            self.logger.exception("Cache %s error for key %s", op, key)
            return default

    async def get(self, key: str, as_type: type | None = None) -> Any:
        """Return the cached value or MISSING if absent, expired or unreadable.

        Args:
            key: Cache key (use omni.infrastructure.cache.keys builders).
            as_type: Optional dataclass/type to decode the JSON value into.

        Returns:
            Cached value (possibly None when None was stored) or MISSING.
        """
        raw = await self._run("get", key, lambda r: r.get(self._k(key)), None)
        if raw is None:
            self.logger.debug("Cache MISS: %s", key)
            return MISSING
        try:
            envelope = json.loads(raw)
            written_at = float(envelope["written_at"])
            ttl = int(envelope["ttl"])
            value = envelope["value"]
        except (ValueError, TypeError, KeyError):
            self.logger.warning("Cache entry for key %s is malformed; treating as miss", key)
            await self.delete(key)
            return MISSING
        if self._clock() >= written_at + ttl:
            self.logger.debug("Cache EXPIRED: %s", key)
            await self.delete(key)
            return MISSING
        if as_type is not None:
            try:
                value = decode(as_type, value)
            except CacheSerializationError as e:
                self.logger.warning("Cache decode failed for key %s: %s", key, e.message)
                await self.delete(key)
                return MISSING
        self.logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store value with TTL, overwriting unconditionally. Returns True on success.

        Args:
            key: Cache key.
            value: Dataclass read-model or JSON-compatible value.
            ttl: Time-to-live in seconds, counted from now.

        Returns:
            True if stored, False otherwise.
        """
        if ttl <= 0:
            self.logger.warning("Cache SET skipped for key %s: non-positive TTL %s", key, ttl)
            return False
        try:
            payload = json.dumps(
                {"value": encode(value), "ttl": ttl, "written_at": self._clock()}
            )
        except (CacheSerializationError, TypeError, ValueError) as e:
            self.logger.warning("Cache SET skipped for key %s: %s", key, e)
            return False
        stored = await self._run(
            "set", key, lambda r: r.setex(self._k(key), ttl, payload), False
        )
        if stored:
            self.logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return bool(stored)

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True only if a key was removed."""
        removed = await self._run("delete", key, lambda r: r.delete(self._k(key)), 0)
        if removed:
            self.logger.debug("Cache DELETE: %s", key)
        return bool(removed)

    async def exists(self, key: str) -> bool:
        """Return True if key holds a readable, unexpired entry."""
        return await self.get(key) is not MISSING

    async def ping(self) -> bool:
        """Return True if Redis answers PING."""
        return bool(await self._run("ping", "-", lambda r: r.ping(), False))

    async def _unlink_matching(self, client: redis.Redis, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking)."""
        deleted = 0
        chunk: list[str] = []
        async for key in client.scan_iter(match=pattern):
            chunk.append(key)
            if len(chunk) >= _UNLINK_CHUNK_SIZE:
                deleted += await client.unlink(*chunk)
                chunk = []
        if chunk:
            deleted += await client.unlink(*chunk)
        return deleted

    async def flush(self) -> bool:
        """Clear every key in this cache's namespace. Operator tooling only.

        With a prefix only prefixed keys are removed; without one the whole
        Redis database is flushed.

        Returns:
            True if cleared, False otherwise.
        """
        if not self.prefix:
            cleared = await self._run("flush", "*", lambda r: r.flushdb(), False)
            if cleared:
                self.logger.warning("Cache CLEARED: all keys deleted")
            return bool(cleared)
        pattern = f"{self.prefix}*"
        deleted = await self._run(
            "flush", pattern, lambda r: self._unlink_matching(r, pattern), None
        )
        if deleted is None:
            return False
        self.logger.warning("Cache CLEARED: %s (%s keys)", pattern, deleted)
        return True
