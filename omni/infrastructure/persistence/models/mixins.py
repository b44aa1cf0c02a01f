"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, TenantMixin, NullableTenantMixin, TimestampMixin and
the combined MultiTenantModel.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from omni.shared.utils import generate_cuid, utc_now


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """Mixin for multi-tenant models: required, indexed tenant_id discriminator.

    The tenant registry lives in the admin console's own store, so there
    is no foreign key here; isolation is by row scoping only.
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class NullableTenantMixin:
    """Like TenantMixin but tenant_id may be NULL (single-tenant deployments)."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware, set by the application)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
        )


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """Combined mixin: CUID + tenant_id + created_at/updated_at."""

    __abstract__ = True
