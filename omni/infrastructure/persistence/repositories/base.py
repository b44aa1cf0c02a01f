"""Base repository: per-operation transactions, tenant scoping and error translation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import ColumnElement, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.base import ExecutableOption

from omni.domain.exceptions import ConstraintViolationException, ResourceNotFoundException
from omni.infrastructure.exceptions import TransportException
from omni.infrastructure.persistence.database import Base, Database

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
ResultType = TypeVar("ResultType")


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class BaseRepository(Generic[ModelType, ResultType]):
    """Base repository with tenant-scoped get/update helpers and typed errors.

    Every public repository method runs in its own transaction (see
    _transaction), so a returned result is already committed. Subclasses set
    entity_type and implement _to_result (ORM row -> application DTO).

    Error translation:
        IntegrityError (unique key)           -> ConstraintViolationException
        OperationalError / InterfaceError     -> TransportException
        timeout (db_command_timeout)          -> TransportException
    """

    entity_type: ClassVar[str] = "entity"

    def __init__(
        self,
        database: Database,
        model: type[ModelType],
        *,
        log: logging.Logger | None = None,
    ) -> None:
        self.database = database
        self.model = model
        self.logger = log or logger

    def _to_result(self, obj: ModelType) -> ResultType:
        """Map an ORM row to its read-model. Implemented by subclasses."""
        raise NotImplementedError

    @asynccontextmanager
    async def _transaction(
        self,
        operation: str,
        *,
        conflict: dict[str, Any] | None = None,
        tenant_id: str | None = None,
    ) -> AsyncIterator[AsyncSession]:
        """Yield a session in a transaction bounded by the command timeout.

        Args:
            operation: Name used in TransportException and logs.
            conflict: Field values reported if a unique constraint fires.
            tenant_id: Tenant reported if a unique constraint fires.
        """
        try:
            async with asyncio.timeout(self.database.command_timeout):
                async with self.database.transaction() as session:
                    yield session
        except IntegrityError as e:
            self.logger.info("%s rejected by constraint: %s", operation, e.orig)
            raise ConstraintViolationException(
                self.entity_type, conflict or {}, tenant_id
            ) from e
        except TimeoutError as e:
            self.logger.error("%s timed out after %ss", operation, self.database.command_timeout)
            raise TransportException(operation, "timed out") from e
        except (OperationalError, InterfaceError) as e:
            self.logger.error("%s failed: %s", operation, e.orig)
            raise TransportException(operation, str(e.orig)) from e
        except OSError as e:
            self.logger.error("%s failed: %s", operation, e)
            raise TransportException(operation, str(e)) from e

    def _tenant_clause(self, tenant_id: str | None) -> ColumnElement[bool]:
        """WHERE clause scoping rows to tenant_id (IS NULL for single-tenant rows)."""
        column: Any = self.model.tenant_id  # type: ignore[attr-defined]
        return column.is_(None) if tenant_id is None else column == tenant_id

    async def _get_one(
        self,
        session: AsyncSession,
        *criteria: ColumnElement[bool],
        options: Sequence[ExecutableOption] = (),
    ) -> ModelType | None:
        """Return the single row matching criteria, or None."""
        stmt = select(self.model).where(*criteria)
        if options:
            stmt = stmt.options(*options)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _find(self, operation: str, *criteria: ColumnElement[bool]) -> ResultType | None:
        """Read-only lookup in its own transaction."""
        async with self._transaction(operation) as session:
            obj = await self._get_one(session, *criteria)
            return self._to_result(obj) if obj is not None else None

    async def _check_null_tenant_unique(
        self,
        session: AsyncSession,
        tenant_id: str | None,
        fields: dict[str, Any],
        *,
        exclude_id: str | None = None,
    ) -> None:
        """Report a (tenant_id, field) collision when tenant_id is NULL.

        The partial unique indexes on single-tenant rows are what enforce it;
        this lookup only turns the common case into a clean conflict.
        """
        if tenant_id is not None or not fields:
            return
        model: Any = self.model
        criteria = [self._tenant_clause(None)]
        criteria.extend(getattr(model, name) == _column_value(v) for name, v in fields.items())
        if exclude_id is not None:
            criteria.append(model.id != exclude_id)
        if await self._get_one(session, *criteria) is not None:
            raise ConstraintViolationException(self.entity_type, fields, None)

    async def _check_references(
        self, session: AsyncSession, tenant_id: str | None, values: dict[str, Any]
    ) -> None:
        """Raise ResourceNotFoundException if values point outside the tenant. No-op by default."""

    async def _update(
        self,
        operation: str,
        tenant_id: str | None,
        lookup: ColumnElement[bool],
        resource_id: str,
        changes: dict[str, Any],
        *,
        unique_fields: Sequence[str] = (),
    ) -> tuple[ResultType, ResultType]:
        """Apply changes to the tenant's row matching lookup.

        Returns:
            (before, after) read-models, so callers can reconcile anything
            derived from the old values.

        Raises:
            ResourceNotFoundException: no such row in this tenant.
            ConstraintViolationException: a unique field collides.
        """
        conflict = {name: changes[name] for name in unique_fields if name in changes}
        async with self._transaction(operation, conflict=conflict, tenant_id=tenant_id) as session:
            obj = await self._get_one(session, self._tenant_clause(tenant_id), lookup)
            if obj is None:
                raise ResourceNotFoundException(self.entity_type, resource_id)
            before = self._to_result(obj)
            await self._check_null_tenant_unique(
                session, tenant_id, conflict, exclude_id=getattr(obj, "id", None)
            )
            await self._check_references(session, tenant_id, changes)
            for name, value in changes.items():
                setattr(obj, name, _column_value(value))
            await session.flush()
            await session.refresh(obj)
            return before, self._to_result(obj)
