"""DTOs for stock use cases."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StockResult:
    """Stock record read-model. One per (tenant, product).

    available_qty is expected to equal quantity - reserved_qty; the store
    does not enforce it.
    """

    id: str
    tenant_id: str
    product_id: str
    quantity: int
    reserved_qty: int
    available_qty: int
    reorder_level: int | None
    max_stock_level: int | None
    last_updated: datetime


@dataclass(frozen=True)
class StockCreate:
    """Input for creating a stock record."""

    product_id: str
    quantity: int = 0
    reorder_level: int | None = None
    max_stock_level: int | None = None


@dataclass(frozen=True)
class StockUpdate:
    """Partial update for a stock record. None means "leave unchanged"."""

    quantity: int | None = None
    reserved_qty: int | None = None
    reorder_level: int | None = None
    max_stock_level: int | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields that were set."""
        return {k: v for k, v in vars(self).items() if v is not None}
