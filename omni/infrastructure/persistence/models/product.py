"""Catalog ORM models: category and product (tenant-scoped)."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from omni.domain.enums import ProductStatus
from omni.infrastructure.persistence.database import Base
from omni.infrastructure.persistence.models.mixins import MultiTenantModel


class Category(MultiTenantModel, Base):
    """Product category. Table: category. Unique (tenant_id, name)."""

    __tablename__ = "category"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_category_tenant_name"),
    )


class Product(MultiTenantModel, Base):
    """Catalog item. Table: product. Unique (tenant_id, sku)."""

    __tablename__ = "product"

    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ProductStatus.ACTIVE.value
    )
    category_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("category.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    stock: Mapped[Stock | None] = relationship(  # noqa: F821
        back_populates="product",
        cascade="all, delete-orphan",
        uselist=False,
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "sku", name="uq_product_tenant_sku"),
    )
