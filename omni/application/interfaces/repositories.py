"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Every method runs in its own transaction and raises typed errors:
ConstraintViolationException, ResourceNotFoundException, TransportException.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from omni.domain.enums import AccountRole, AccountStatus, ProductStatus

if TYPE_CHECKING:
    from omni.application.dtos.account import (
        AccountCreate,
        AccountResult,
        AccountWithSessions,
        SessionCreate,
        SessionResult,
    )
    from omni.application.dtos.catalog import (
        CategoryResult,
        ProductCreate,
        ProductResult,
    )
    from omni.application.dtos.stock import StockCreate, StockResult


# Account repository interface
class IAccountRepository(Protocol):
    """Protocol for account repository (DIP)."""

    async def create_account(
        self, tenant_id: str | None, data: AccountCreate
    ) -> AccountResult:
        """Create account; email must be unique in tenant."""
        ...

    async def get_account(
        self, tenant_id: str | None, account_id: str
    ) -> AccountResult | None:
        """Return account by id in tenant or None."""
        ...

    async def get_account_by_email(
        self, tenant_id: str | None, email: str
    ) -> AccountResult | None:
        """Return account by email in tenant or None."""
        ...

    async def get_account_with_sessions(
        self, tenant_id: str | None, account_id: str, now: datetime
    ) -> AccountWithSessions | None:
        """Return account with its live sessions or None."""
        ...

    async def update_account(
        self, tenant_id: str | None, account_id: str, changes: dict[str, object]
    ) -> tuple[AccountResult, AccountResult]:
        """Apply changes; return (before, after)."""
        ...

    async def delete_account(
        self, tenant_id: str | None, account_id: str
    ) -> AccountWithSessions:
        """Delete account and its sessions; return what was deleted."""
        ...

    async def list_accounts(
        self,
        tenant_id: str | None,
        *,
        role: AccountRole | None = None,
        status: AccountStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AccountResult]:
        """List accounts in tenant, newest first."""
        ...


# Session repository interface
class ISessionRepository(Protocol):
    """Protocol for session repository (DIP). Expiry is lazy: enforced on read."""

    async def create_session(
        self, tenant_id: str | None, data: SessionCreate
    ) -> SessionResult:
        """Create session for an account of the tenant; token must be unique."""
        ...

    async def get_session_by_token(
        self, token: str, now: datetime
    ) -> SessionResult | None:
        """Return live session or None; an expired session is deleted."""
        ...

    async def delete_session_by_token(self, token: str) -> SessionResult | None:
        """Delete session; return it, or None if absent."""
        ...


# Product repository interface
class IProductRepository(Protocol):
    """Protocol for product repository (DIP)."""

    async def create_product(self, tenant_id: str, data: ProductCreate) -> ProductResult:
        """Create product; sku must be unique in tenant."""
        ...

    async def get_product(self, tenant_id: str, product_id: str) -> ProductResult | None:
        """Return product by id in tenant or None."""
        ...

    async def get_product_by_sku(self, tenant_id: str, sku: str) -> ProductResult | None:
        """Return product by sku in tenant or None."""
        ...

    async def update_product(
        self, tenant_id: str, product_id: str, changes: dict[str, object]
    ) -> tuple[ProductResult, ProductResult]:
        """Apply changes; return (before, after)."""
        ...

    async def delete_product(
        self, tenant_id: str, product_id: str
    ) -> tuple[ProductResult, StockResult | None]:
        """Delete product and its stock record; return both."""
        ...

    async def list_products(
        self,
        tenant_id: str,
        *,
        status: ProductStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductResult]:
        """List products in tenant."""
        ...


# Category repository interface
class ICategoryRepository(Protocol):
    """Protocol for category repository (DIP)."""

    async def create_category(
        self, tenant_id: str, name: str, description: str | None = None
    ) -> CategoryResult:
        """Create category; name must be unique in tenant."""
        ...

    async def list_categories(self, tenant_id: str) -> list[CategoryResult]:
        """Return all categories in tenant by name."""
        ...


# Stock repository interface
class IStockRepository(Protocol):
    """Protocol for stock repository (DIP). available_qty is supplied by the caller."""

    async def create_stock(
        self, tenant_id: str, data: StockCreate, available_qty: int
    ) -> StockResult:
        """Create stock record for a product of the tenant."""
        ...

    async def get_stock(self, tenant_id: str, stock_id: str) -> StockResult | None:
        """Return stock record by id in tenant or None."""
        ...

    async def get_stock_by_product(
        self, tenant_id: str, product_id: str
    ) -> StockResult | None:
        """Return stock record of product in tenant or None."""
        ...

    async def update_stock(
        self, tenant_id: str, product_id: str, changes: dict[str, object]
    ) -> tuple[StockResult, StockResult]:
        """Apply changes; return (before, after)."""
        ...

    async def delete_stock(self, tenant_id: str, product_id: str) -> StockResult:
        """Delete stock record of product; return it."""
        ...
