"""Pytest configuration and fixtures for omni.

Repository and service tests run against an in-memory SQLite database
(sqlite+aiosqlite, fresh per test). The cache is replaced by InMemoryCache,
a CacheProtocol double that uses the real codec, honours TTLs against a
settable clock, counts calls and can be switched to fail every operation.
"""

import json
import os
from datetime import datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from omni.application.services import CacheAsideService  # noqa: E402
from omni.core.config import get_settings  # noqa: E402
from omni.infrastructure.cache import MISSING  # noqa: E402
from omni.infrastructure.cache.codec import decode, encode  # noqa: E402
from omni.infrastructure.persistence import Database  # noqa: E402
from omni.infrastructure.persistence.repositories import (  # noqa: E402
    AccountRepository,
    CategoryRepository,
    ProductRepository,
    SessionRepository,
    StockRepository,
)
from omni.shared.utils import utc_now  # noqa: E402

get_settings.cache_clear()


class InMemoryCache:
    """CacheProtocol double. Entries expire against self.now (epoch seconds)."""

    def __init__(self) -> None:
        self.store: dict[str, tuple[str, float]] = {}
        self.now = 0.0
        self.fail = False
        self.available = True
        self.calls: dict[str, int] = {"get": 0, "set": 0, "delete": 0, "flush": 0}
        self.hits = 0

    def is_available(self) -> bool:
        return self.available

    async def get(self, key: str, as_type: type | None = None) -> Any:
        self.calls["get"] += 1
        if self.fail or key not in self.store:
            return MISSING
        raw, expires_at = self.store[key]
        if self.now >= expires_at:
            del self.store[key]
            return MISSING
        self.hits += 1
        value = json.loads(raw)
        return decode(as_type, value) if as_type is not None else value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        self.calls["set"] += 1
        if self.fail or ttl <= 0:
            return False
        self.store[key] = (json.dumps(encode(value)), self.now + ttl)
        return True

    async def delete(self, key: str) -> bool:
        self.calls["delete"] += 1
        if self.fail:
            return False
        return self.store.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not MISSING

    async def flush(self) -> bool:
        self.calls["flush"] += 1
        if self.fail:
            return False
        self.store.clear()
        return True

    async def ping(self) -> bool:
        return not self.fail

    def ttl_of(self, key: str) -> float:
        return self.store[key][1] - self.now


class CountingRepo:
    """Wraps a repository and counts calls per method name."""

    def __init__(self, inner: Any) -> None:
        self._inner = inner
        self.calls: dict[str, int] = {}

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._inner, name)
        if not callable(attr):
            return attr

        async def counted(*args: Any, **kwargs: Any) -> Any:
            self.calls[name] = self.calls.get(name, 0) + 1
            return await attr(*args, **kwargs)

        return counted

    def count(self, name: str) -> int:
        return self.calls.get(name, 0)


class Clock:
    """Settable UTC clock for the service (starts at real now)."""

    def __init__(self) -> None:
        self.current = utc_now()

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
async def database() -> Database:
    """Connected in-memory SQLite database with all tables created."""
    db = Database("sqlite+aiosqlite://")
    db.connect()
    await db.create_all()
    yield db
    await db.disconnect()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def service(database: Database, cache: InMemoryCache, clock: Clock) -> CacheAsideService:
    """CacheAsideService over real repositories; each repository counts its calls."""
    settings = get_settings()
    return CacheAsideService(
        cache,
        CountingRepo(AccountRepository(database)),
        CountingRepo(SessionRepository(database)),
        CountingRepo(ProductRepository(database)),
        CountingRepo(StockRepository(database)),
        CountingRepo(CategoryRepository(database)),
        default_ttl=settings.cache_ttl,
        session_ttl=settings.cache_ttl_sessions,
        clock=clock,
    )


@pytest.fixture
async def client(database: Database, cache: InMemoryCache) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), with store handles on app.state."""
    from omni.main import create_app

    app = create_app()
    app.state.database = database
    app.state.cache = cache
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
