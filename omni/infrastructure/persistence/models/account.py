"""Account and session ORM models (tenant-scoped; tenant may be NULL)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from omni.domain.enums import AccountRole, AccountStatus
from omni.infrastructure.persistence.database import Base
from omni.infrastructure.persistence.models.mixins import (
    CuidMixin,
    NullableTenantMixin,
    TimestampMixin,
)
from omni.shared.utils import utc_now


class Account(CuidMixin, NullableTenantMixin, TimestampMixin, Base):
    """Back-office account. Table: account. Unique (tenant_id, email).

    The unique constraint treats NULL tenants as distinct, so single-tenant
    rows get a partial unique index on email.
    """

    __tablename__ = "account"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AccountRole.SALESPERSON.value
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AccountStatus.ACTIVE.value
    )

    sessions: Mapped[list[AccountSession]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="AccountSession.created_at",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_account_tenant_email"),
        Index(
            "uq_account_email_null_tenant",
            "email",
            unique=True,
            postgresql_where=text("tenant_id IS NULL"),
            sqlite_where=text("tenant_id IS NULL"),
        ),
    )


class AccountSession(CuidMixin, NullableTenantMixin, Base):
    """Login session of an account. Table: account_session. Token is globally unique."""

    __tablename__ = "account_session"

    account_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    account: Mapped[Account] = relationship(back_populates="sessions")
