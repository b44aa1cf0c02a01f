"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Database is an explicitly constructed handle owned by the composition root
(omni.core.lifespan): connect() builds the engine, disconnect() disposes it.
Repositories receive the handle and open one transaction per operation.

Production uses postgresql+asyncpg; tests use sqlite+aiosqlite in memory
(a StaticPool keeps the single in-memory database alive across sessions).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from omni.core.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


class Database:
    """Relational store handle: engine, session factory and liveness probe."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int | None = None,
        max_overflow: int | None = None,
        command_timeout: float = 30.0,
        log: logging.Logger | None = None,
    ) -> None:
        self.url = url
        self.echo = echo
        self.pool_size = pool_size if pool_size is not None else 20
        self.max_overflow = max_overflow if max_overflow is not None else 30
        self.command_timeout = command_timeout
        self.logger = log or logger
        self.engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, *, log: logging.Logger | None = None
    ) -> Database:
        """Build a handle from application settings (not yet connected)."""
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            command_timeout=settings.db_command_timeout,
            log=log,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        """Create engine and session factory. Idempotent."""
        if self._sessionmaker is not None:
            return
        engine_kwargs: dict[str, Any] = {"echo": self.echo}
        if self.is_sqlite:
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs.update(
                pool_pre_ping=True,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=3600,
            )
            if "postgresql" in self.url:
                engine_kwargs["connect_args"] = {"command_timeout": self.command_timeout}
        self.engine = create_async_engine(self.url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self.logger.info("Database engine created (%s)", self.engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        """Dispose the engine. Safe to call when not connected."""
        if self.engine is not None:
            await self.engine.dispose()
            self.logger.info("Database engine disposed")
        self.engine = None
        self._sessionmaker = None

    @property
    def is_connected(self) -> bool:
        return self._sessionmaker is not None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction: commit on success, rollback on error."""
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected; call connect() first")
        async with self._sessionmaker() as session:
            async with session.begin():
                yield session

    async def create_all(self) -> None:
        """Create all tables (tests and local development; production uses migrations)."""
        if self.engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        from omni.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Run SELECT 1; return False instead of raising when the store is down."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (DBAPIError, SQLAlchemyError, OSError) as e:
            self.logger.error("Database health check failed: %s", e)
            return False
