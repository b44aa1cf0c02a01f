"""Application lifespan: startup and shutdown.

Composition root for the data-access layer. Builds the relational store and
cache handles from settings, connects them, wires repositories into the
cache-aside service on app.state, and disconnects both on shutdown. No
business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from omni.application.services import CacheAsideService
from omni.core.config import Settings, get_settings
from omni.infrastructure.cache import CacheProtocol, CacheService
from omni.infrastructure.persistence import Database
from omni.infrastructure.persistence.repositories import (
    AccountRepository,
    CategoryRepository,
    ProductRepository,
    SessionRepository,
    StockRepository,
)

logger = logging.getLogger(__name__)


def build_cache_aside_service(
    database: Database,
    cache: CacheProtocol | None,
    settings: Settings,
    *,
    log: logging.Logger | None = None,
) -> CacheAsideService:
    """Wire one repository per entity over database into a CacheAsideService."""
    return CacheAsideService(
        cache,
        AccountRepository(database, log=log),
        SessionRepository(database, log=log),
        ProductRepository(database, log=log),
        StockRepository(database, log=log),
        CategoryRepository(database, log=log),
        default_ttl=settings.cache_ttl,
        session_ttl=settings.cache_ttl_sessions,
        log=log,
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: database engine, Redis cache (if enabled), service
    wiring. Shutdown order: cache disconnect, database engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    database = Database.from_settings(settings)
    database.connect()
    app.state.database = database

    if settings.redis_enabled:
        cache = CacheService(settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None
        logger.info("Redis disabled; serving from the database only")

    app.state.cache_aside = build_cache_aside_service(database, app.state.cache, settings)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    await database.disconnect()
