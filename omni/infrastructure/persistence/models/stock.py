"""Stock ORM model: one record per (tenant, product)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from omni.infrastructure.persistence.database import Base
from omni.infrastructure.persistence.models.mixins import CuidMixin, TenantMixin
from omni.infrastructure.persistence.models.product import Product
from omni.shared.utils import utc_now


class Stock(CuidMixin, TenantMixin, Base):
    """Stock level of a product. Table: stock. Unique (tenant_id, product_id).

    available_qty is not derived by the database; writers keep it equal to
    quantity - reserved_qty.
    """

    __tablename__ = "stock"

    product_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("product.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reserved_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reorder_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_stock_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    product: Mapped[Product] = relationship(back_populates="stock")

    __table_args__ = (
        UniqueConstraint("tenant_id", "product_id", name="uq_stock_tenant_product"),
    )
