"""Session repository. Token lookups are tenant-implied; expiry is enforced lazily on read."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select

from omni.application.dtos import SessionCreate, SessionResult
from omni.domain.exceptions import ResourceNotFoundException
from omni.infrastructure.persistence.database import Database
from omni.infrastructure.persistence.models import Account, AccountSession
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.shared.utils import ensure_utc

# Reported instead of the token itself when a duplicate token is rejected.
_REDACTED = "[redacted]"


def session_to_result(s: AccountSession) -> SessionResult:
    """Map ORM AccountSession to application SessionResult."""
    return SessionResult(
        id=s.id,
        tenant_id=s.tenant_id,
        account_id=s.account_id,
        token=s.token,
        expires_at=ensure_utc(s.expires_at),
        created_at=ensure_utc(s.created_at),
    )


class SessionRepository(BaseRepository[AccountSession, SessionResult]):
    """Session repository.

    There is no background sweep: an expired session is removed only when
    someone looks it up, so expired rows may linger indefinitely. Do not
    count rows in account_session expecting only live sessions.
    """

    entity_type = "session"

    def __init__(self, database: Database, *, log: logging.Logger | None = None) -> None:
        super().__init__(database, AccountSession, log=log)

    def _to_result(self, obj: AccountSession) -> SessionResult:
        return session_to_result(obj)

    async def create_session(self, tenant_id: str | None, data: SessionCreate) -> SessionResult:
        """Create a session for an account of the same tenant.

        Raises:
            ResourceNotFoundException: account not in tenant.
            ConstraintViolationException: token already exists.
        """
        async with self._transaction(
            "create_session", conflict={"token": _REDACTED}, tenant_id=tenant_id
        ) as session:
            owner_tenant = (
                Account.tenant_id.is_(None) if tenant_id is None else Account.tenant_id == tenant_id
            )
            owner = await session.execute(
                select(Account.id).where(Account.id == data.account_id, owner_tenant)
            )
            if owner.scalar_one_or_none() is None:
                raise ResourceNotFoundException("account", data.account_id)
            row = AccountSession(
                tenant_id=tenant_id,
                account_id=data.account_id,
                token=data.token,
                expires_at=data.expires_at,
            )
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return session_to_result(row)

    async def get_session_by_token(self, token: str, now: datetime) -> SessionResult | None:
        """Return the live session for token.

        A session whose expires_at is not after now is deleted as a side
        effect and reported as not found.
        """
        async with self._transaction("get_session_by_token") as session:
            row = await self._get_one(session, AccountSession.token == token)
            if row is None:
                return None
            if ensure_utc(row.expires_at) <= now:
                await session.delete(row)
                await session.flush()
                self.logger.info("Session %s expired; deleted on read", row.id)
                return None
            return session_to_result(row)

    async def delete_session_by_token(self, token: str) -> SessionResult | None:
        """Delete the session for token. Returns the deleted session, or None if absent."""
        async with self._transaction("delete_session_by_token") as session:
            row = await self._get_one(session, AccountSession.token == token)
            if row is None:
                return None
            deleted = session_to_result(row)
            await session.delete(row)
            await session.flush()
            return deleted
