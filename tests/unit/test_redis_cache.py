"""Unit tests for CacheService with a mocked redis.asyncio client.

Covers the envelope (TTL checked on read), prefixing, fail-open behaviour
and namespace flush.
"""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis.asyncio as redis

from omni.application.dtos import CategoryResult
from omni.core.config import Settings
from omni.infrastructure.cache import MISSING, CacheService
from omni.infrastructure.cache.cache_protocol import CacheProtocol
from omni.infrastructure.cache.codec import encode


def _settings(prefix: str = "t:") -> Settings:
    return Settings(database_url="sqlite+aiosqlite://", cache_prefix=prefix)


def _envelope(value, ttl: int = 60, written_at: float = 1000.0) -> str:
    return json.dumps({"value": value, "ttl": ttl, "written_at": written_at})


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def now() -> list[float]:
    return [1000.0]


@pytest.fixture
def cache(client: AsyncMock, now: list[float]) -> CacheService:
    return CacheService(_settings(), redis_client=client, clock=lambda: now[0])


async def test_get_missing_key_returns_missing(cache: CacheService, client: AsyncMock) -> None:
    client.get.return_value = None
    assert await cache.get("account:t1:a1") is MISSING
    client.get.assert_awaited_once_with("t:account:t1:a1")


async def test_stored_none_is_distinct_from_missing(cache: CacheService, client: AsyncMock) -> None:
    client.get.return_value = _envelope(None)
    assert await cache.get("k") is None


async def test_set_writes_envelope_with_setex(cache: CacheService, client: AsyncMock) -> None:
    client.setex.return_value = True
    assert await cache.set("k", {"a": 1}, 30) is True
    key, ttl, payload = client.setex.await_args.args
    assert key == "t:k"
    assert ttl == 30
    assert json.loads(payload) == {"value": {"a": 1}, "ttl": 30, "written_at": 1000.0}


async def test_set_rejects_non_positive_ttl(cache: CacheService, client: AsyncMock) -> None:
    assert await cache.set("k", 1, 0) is False
    client.setex.assert_not_awaited()


async def test_set_unencodable_value_fails_softly(cache: CacheService, client: AsyncMock) -> None:
    assert await cache.set("k", object(), 30) is False
    client.setex.assert_not_awaited()


async def test_entry_past_ttl_reads_as_absent(
    cache: CacheService, client: AsyncMock, now: list[float]
) -> None:
    """Envelope older than its TTL is absent even if Redis still returns it."""
    client.get.return_value = _envelope("v", ttl=60, written_at=1000.0)
    now[0] = 1059.0
    assert await cache.get("k") == "v"
    now[0] = 1060.0
    assert await cache.get("k") is MISSING
    client.delete.assert_awaited_with("t:k")


async def test_get_decodes_into_type(cache: CacheService, client: AsyncMock) -> None:
    category = CategoryResult(
        id="c1",
        tenant_id="t1",
        name="Tools",
        description=None,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )
    client.get.return_value = _envelope(encode(category))
    assert await cache.get("k", CategoryResult) == category


async def test_undecodable_entry_is_a_miss_and_dropped(cache: CacheService, client: AsyncMock) -> None:
    client.get.return_value = _envelope({"id": "c1"})
    assert await cache.get("k", CategoryResult) is MISSING
    client.delete.assert_awaited_with("t:k")


async def test_malformed_envelope_is_a_miss(cache: CacheService, client: AsyncMock) -> None:
    client.get.return_value = "not json"
    assert await cache.get("k") is MISSING


async def test_connection_error_fails_open(cache: CacheService, client: AsyncMock) -> None:
    """Injected clients are not reconnected; errors degrade to miss/False."""
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.TimeoutError("slow")
    client.delete.side_effect = redis.ConnectionError("down")
    assert await cache.get("k") is MISSING
    assert await cache.set("k", 1, 10) is False
    assert await cache.delete("k") is False


async def test_response_error_fails_open(cache: CacheService, client: AsyncMock) -> None:
    client.get.side_effect = redis.ResponseError("WRONGTYPE")
    assert await cache.get("k") is MISSING


async def test_delete_reports_whether_key_existed(cache: CacheService, client: AsyncMock) -> None:
    client.delete.return_value = 1
    assert await cache.delete("k") is True
    client.delete.return_value = 0
    assert await cache.delete("k") is False


async def test_exists_false_for_expired(
    cache: CacheService, client: AsyncMock, now: list[float]
) -> None:
    client.get.return_value = _envelope(1, ttl=10, written_at=1000.0)
    assert await cache.exists("k") is True
    now[0] = 2000.0
    assert await cache.exists("k") is False


async def test_flush_with_prefix_unlinks_namespace_only(
    cache: CacheService, client: AsyncMock
) -> None:
    async def keys(match: str):
        for key in ("t:a", "t:b"):
            yield key

    client.scan_iter = MagicMock(side_effect=keys)
    client.unlink.return_value = 2
    assert await cache.flush() is True
    client.scan_iter.assert_called_once_with(match="t:*")
    client.unlink.assert_awaited_once_with("t:a", "t:b")
    client.flushdb.assert_not_awaited()


async def test_flush_without_prefix_uses_flushdb(client: AsyncMock) -> None:
    cache = CacheService(_settings(prefix=""), redis_client=client)
    client.flushdb.return_value = True
    assert await cache.flush() is True
    client.flushdb.assert_awaited_once()


async def test_unavailable_cache_never_calls_redis() -> None:
    """Without a connection every operation is a soft failure."""
    cache = CacheService(_settings())
    assert cache.is_available() is False
    assert await cache.get("k") is MISSING
    assert await cache.set("k", 1, 10) is False
    assert await cache.flush() is False


async def test_connect_failure_leaves_cache_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    broken = AsyncMock()
    broken.ping.side_effect = redis.ConnectionError("refused")
    monkeypatch.setattr(redis, "from_url", MagicMock(return_value=broken))
    cache = CacheService(_settings())
    await cache.connect()
    assert cache.is_available() is False
    broken.aclose.assert_awaited_once()


async def test_disconnect_leaves_injected_client_open(cache: CacheService, client: AsyncMock) -> None:
    await cache.disconnect()
    client.aclose.assert_not_awaited()
    assert cache.is_available() is False


async def test_failed_connect_retries_after_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    """A cache that could not connect at startup recovers once Redis is back."""
    now = [1000.0]
    flaky = AsyncMock()
    flaky.ping.side_effect = [redis.ConnectionError("refused"), True]
    flaky.get.return_value = _envelope({"answer": 42}, ttl=60, written_at=1000.0)
    from_url = MagicMock(return_value=flaky)
    monkeypatch.setattr(redis, "from_url", from_url)
    cache = CacheService(_settings(), clock=lambda: now[0])

    await cache.connect()
    assert cache.is_available() is False
    assert await cache.get("k") is MISSING
    flaky.get.assert_not_awaited()

    now[0] += cache.settings.redis_retry_interval
    assert cache.is_available() is True
    assert await cache.get("k") == {"answer": 42}
    assert from_url.call_count == 2
    flaky.get.assert_awaited_once_with("t:k")


async def test_timeout_then_failed_reconnect_is_not_permanent(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """One timeout costs a miss and a backoff window, not the cache for the process."""
    now = [1000.0]
    client = AsyncMock()
    client.ping.side_effect = [True, redis.ConnectionError("refused"), True]
    client.get.side_effect = [
        redis.TimeoutError("slow"),
        _envelope("v", ttl=60, written_at=1000.0),
    ]
    monkeypatch.setattr(redis, "from_url", MagicMock(return_value=client))
    cache = CacheService(_settings(), clock=lambda: now[0])
    await cache.connect()
    assert cache.is_available() is True

    assert await cache.get("k") is MISSING
    assert cache.is_available() is False

    now[0] += cache.settings.redis_retry_interval + 1
    assert await cache.get("k") == "v"
    assert cache.is_available() is True


async def test_disconnect_stops_reconnect_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    now = [1000.0]
    broken = AsyncMock()
    broken.ping.side_effect = redis.ConnectionError("refused")
    from_url = MagicMock(return_value=broken)
    monkeypatch.setattr(redis, "from_url", from_url)
    cache = CacheService(_settings(), clock=lambda: now[0])
    await cache.connect()
    await cache.disconnect()

    now[0] += 3600
    assert cache.is_available() is False
    assert await cache.get("k") is MISSING
    assert from_url.call_count == 1


def test_cache_service_implements_every_protocol_method() -> None:
    """Health checks call ping() through the protocol type."""
    names = {n for n in vars(CacheProtocol) if not n.startswith("_")}
    assert "ping" in names
    assert names <= {n for n in dir(CacheService) if not n.startswith("_")}
