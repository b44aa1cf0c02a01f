"""Account repository. Tenant-scoped CRUD; returns application DTOs."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from omni.application.dtos import (
    AccountCreate,
    AccountResult,
    AccountWithSessions,
)
from omni.domain.enums import AccountRole, AccountStatus
from omni.domain.exceptions import ResourceNotFoundException
from omni.infrastructure.persistence.database import Database
from omni.infrastructure.persistence.models import Account
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.infrastructure.persistence.repositories.session_repo import session_to_result
from omni.shared.utils import ensure_utc


def account_to_result(a: Account) -> AccountResult:
    """Map ORM Account to application AccountResult."""
    return AccountResult(
        id=a.id,
        tenant_id=a.tenant_id,
        email=a.email,
        display_name=a.display_name,
        role=AccountRole(a.role),
        status=AccountStatus(a.status),
        created_at=ensure_utc(a.created_at),
        updated_at=ensure_utc(a.updated_at),
    )


class AccountRepository(BaseRepository[Account, AccountResult]):
    """Account repository. Email is unique per tenant (including the NULL tenant)."""

    entity_type = "account"

    def __init__(self, database: Database, *, log: logging.Logger | None = None) -> None:
        super().__init__(database, Account, log=log)

    def _to_result(self, obj: Account) -> AccountResult:
        return account_to_result(obj)

    async def create_account(self, tenant_id: str | None, data: AccountCreate) -> AccountResult:
        """Create account; raise ConstraintViolationException if email is taken in tenant."""
        conflict = {"email": data.email}
        account = Account(
            tenant_id=tenant_id,
            email=data.email,
            display_name=data.display_name,
            role=data.role.value,
            status=data.status.value,
        )
        async with self._transaction(
            "create_account", conflict=conflict, tenant_id=tenant_id
        ) as session:
            await self._check_null_tenant_unique(session, tenant_id, conflict)
            session.add(account)
            await session.flush()
            await session.refresh(account)
            return account_to_result(account)

    async def get_account(self, tenant_id: str | None, account_id: str) -> AccountResult | None:
        return await self._find(
            "get_account", self._tenant_clause(tenant_id), Account.id == account_id
        )

    async def get_account_by_email(
        self, tenant_id: str | None, email: str
    ) -> AccountResult | None:
        return await self._find(
            "get_account_by_email", self._tenant_clause(tenant_id), Account.email == email
        )

    async def get_account_with_sessions(
        self, tenant_id: str | None, account_id: str, now: datetime
    ) -> AccountWithSessions | None:
        """Return the account with its live sessions (expires_at > now), or None."""
        async with self._transaction("get_account_with_sessions") as session:
            account = await self._get_one(
                session,
                self._tenant_clause(tenant_id),
                Account.id == account_id,
                options=[selectinload(Account.sessions)],
            )
            if account is None:
                return None
            view = AccountWithSessions(
                account=account_to_result(account),
                sessions=tuple(session_to_result(s) for s in account.sessions),
            )
            return view.live(now)

    async def update_account(
        self, tenant_id: str | None, account_id: str, changes: dict[str, object]
    ) -> tuple[AccountResult, AccountResult]:
        """Apply changes; return (before, after).

        Raises:
            ResourceNotFoundException: account not in tenant.
            ConstraintViolationException: new email already used in tenant.
        """
        return await self._update(
            "update_account",
            tenant_id,
            Account.id == account_id,
            account_id,
            changes,
            unique_fields=("email",),
        )

    async def delete_account(
        self, tenant_id: str | None, account_id: str
    ) -> AccountWithSessions:
        """Delete the account and (by cascade) all its sessions.

        Returns:
            The deleted account with every session removed alongside it,
            expired ones included.
        """
        async with self._transaction("delete_account", tenant_id=tenant_id) as session:
            account = await self._get_one(
                session,
                self._tenant_clause(tenant_id),
                Account.id == account_id,
                options=[selectinload(Account.sessions)],
            )
            if account is None:
                raise ResourceNotFoundException(self.entity_type, account_id)
            deleted = AccountWithSessions(
                account=account_to_result(account),
                sessions=tuple(session_to_result(s) for s in account.sessions),
            )
            await session.delete(account)
            await session.flush()
            return deleted

    async def list_accounts(
        self,
        tenant_id: str | None,
        *,
        role: AccountRole | None = None,
        status: AccountStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AccountResult]:
        """List tenant accounts, newest first, optionally filtered by role/status."""
        stmt = select(Account).where(self._tenant_clause(tenant_id))
        if role is not None:
            stmt = stmt.where(Account.role == role.value)
        if status is not None:
            stmt = stmt.where(Account.status == status.value)
        stmt = stmt.order_by(Account.created_at.desc(), Account.id).offset(offset).limit(limit)
        async with self._transaction("list_accounts") as session:
            result = await session.execute(stmt)
            return [account_to_result(a) for a in result.scalars().all()]
