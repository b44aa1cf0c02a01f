"""DTOs for account and session use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from omni.domain.enums import AccountRole, AccountStatus


@dataclass(frozen=True)
class AccountResult:
    """Account read-model (result of get_account, create_account, etc.)."""

    id: str
    tenant_id: str | None
    email: str
    display_name: str | None
    role: AccountRole
    status: AccountStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccountCreate:
    """Input for creating an account."""

    email: str
    display_name: str | None = None
    role: AccountRole = AccountRole.SALESPERSON
    status: AccountStatus = AccountStatus.ACTIVE


@dataclass(frozen=True)
class AccountUpdate:
    """Partial update for an account. None means "leave unchanged"."""

    email: str | None = None
    display_name: str | None = None
    role: AccountRole | None = None
    status: AccountStatus | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields that were set."""
        return {
            name: value
            for name, value in (
                ("email", self.email),
                ("display_name", self.display_name),
                ("role", self.role),
                ("status", self.status),
            )
            if value is not None
        }


@dataclass(frozen=True)
class SessionResult:
    """Session read-model. Live iff expires_at is in the future."""

    id: str
    tenant_id: str | None
    account_id: str
    token: str
    expires_at: datetime
    created_at: datetime

    def is_live(self, now: datetime) -> bool:
        return self.expires_at > now


@dataclass(frozen=True)
class SessionCreate:
    """Input for creating a session. Token issuance happens upstream."""

    account_id: str
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AccountWithSessions:
    """Aggregate view: account plus its sessions (live ones when read)."""

    account: AccountResult
    sessions: tuple[SessionResult, ...] = field(default_factory=tuple)

    def live(self, now: datetime) -> "AccountWithSessions":
        """Return a copy holding only sessions that are still live at now."""
        return AccountWithSessions(
            account=self.account,
            sessions=tuple(s for s in self.sessions if s.is_live(now)),
        )
