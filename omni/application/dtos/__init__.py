"""Application DTOs (no ORM dependency)."""

from omni.application.dtos.account import (
    AccountCreate,
    AccountResult,
    AccountUpdate,
    AccountWithSessions,
    SessionCreate,
    SessionResult,
)
from omni.application.dtos.catalog import (
    CategoryResult,
    ProductCreate,
    ProductResult,
    ProductUpdate,
)
from omni.application.dtos.stock import StockCreate, StockResult, StockUpdate

__all__ = [
    "AccountCreate",
    "AccountResult",
    "AccountUpdate",
    "AccountWithSessions",
    "CategoryResult",
    "ProductCreate",
    "ProductResult",
    "ProductUpdate",
    "SessionCreate",
    "SessionResult",
    "StockCreate",
    "StockResult",
    "StockUpdate",
]
