"""DTOs for catalog use cases: products and categories."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from omni.domain.enums import ProductStatus


@dataclass(frozen=True)
class ProductResult:
    """Product (catalog item) read-model. Price is fixed-point."""

    id: str
    tenant_id: str
    sku: str
    name: str
    description: str | None
    price: Decimal
    status: ProductStatus
    category_id: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ProductCreate:
    """Input for creating a product."""

    sku: str
    name: str
    price: Decimal
    description: str | None = None
    status: ProductStatus = ProductStatus.ACTIVE
    category_id: str | None = None


@dataclass(frozen=True)
class ProductUpdate:
    """Partial update for a product. None means "leave unchanged"."""

    sku: str | None = None
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    status: ProductStatus | None = None
    category_id: str | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields that were set."""
        return {k: v for k, v in vars(self).items() if v is not None}


@dataclass(frozen=True)
class CategoryResult:
    """Category read-model."""

    id: str
    tenant_id: str
    name: str
    description: str | None
    created_at: datetime
