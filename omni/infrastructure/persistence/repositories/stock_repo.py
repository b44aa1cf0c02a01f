"""Stock record repository. One record per (tenant, product)."""

from __future__ import annotations

import logging

from sqlalchemy import select

from omni.application.dtos import StockCreate, StockResult
from omni.domain.exceptions import ResourceNotFoundException
from omni.infrastructure.persistence.database import Database
from omni.infrastructure.persistence.models import Product, Stock
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.shared.utils import ensure_utc


def stock_to_result(s: Stock) -> StockResult:
    """Map ORM Stock to application StockResult."""
    return StockResult(
        id=s.id,
        tenant_id=s.tenant_id,
        product_id=s.product_id,
        quantity=s.quantity,
        reserved_qty=s.reserved_qty,
        available_qty=s.available_qty,
        reorder_level=s.reorder_level,
        max_stock_level=s.max_stock_level,
        last_updated=ensure_utc(s.last_updated),
    )


class StockRepository(BaseRepository[Stock, StockResult]):
    """Stock repository.

    The store does not derive available_qty; callers pass it in on create
    and include it in update changes.
    """

    entity_type = "stock"

    def __init__(self, database: Database, *, log: logging.Logger | None = None) -> None:
        super().__init__(database, Stock, log=log)

    def _to_result(self, obj: Stock) -> StockResult:
        return stock_to_result(obj)

    async def create_stock(
        self, tenant_id: str, data: StockCreate, available_qty: int
    ) -> StockResult:
        """Create the stock record for a product of the same tenant.

        Raises:
            ResourceNotFoundException: product not in tenant.
            ConstraintViolationException: product already has a stock record.
        """
        async with self._transaction(
            "create_stock", conflict={"product_id": data.product_id}, tenant_id=tenant_id
        ) as session:
            product = await session.execute(
                select(Product.id).where(
                    Product.id == data.product_id, Product.tenant_id == tenant_id
                )
            )
            if product.scalar_one_or_none() is None:
                raise ResourceNotFoundException("product", data.product_id)
            stock = Stock(
                tenant_id=tenant_id,
                product_id=data.product_id,
                quantity=data.quantity,
                reserved_qty=0,
                available_qty=available_qty,
                reorder_level=data.reorder_level,
                max_stock_level=data.max_stock_level,
            )
            session.add(stock)
            await session.flush()
            await session.refresh(stock)
            return stock_to_result(stock)

    async def get_stock(self, tenant_id: str, stock_id: str) -> StockResult | None:
        return await self._find(
            "get_stock", self._tenant_clause(tenant_id), Stock.id == stock_id
        )

    async def get_stock_by_product(
        self, tenant_id: str, product_id: str
    ) -> StockResult | None:
        return await self._find(
            "get_stock_by_product",
            self._tenant_clause(tenant_id),
            Stock.product_id == product_id,
        )

    async def update_stock(
        self, tenant_id: str, product_id: str, changes: dict[str, object]
    ) -> tuple[StockResult, StockResult]:
        """Apply changes to the product's stock record; return (before, after)."""
        return await self._update(
            "update_stock",
            tenant_id,
            Stock.product_id == product_id,
            product_id,
            changes,
        )

    async def delete_stock(self, tenant_id: str, product_id: str) -> StockResult:
        """Delete the product's stock record and return it."""
        async with self._transaction("delete_stock", tenant_id=tenant_id) as session:
            stock = await self._get_one(
                session, self._tenant_clause(tenant_id), Stock.product_id == product_id
            )
            if stock is None:
                raise ResourceNotFoundException(self.entity_type, product_id)
            deleted = stock_to_result(stock)
            await session.delete(stock)
            await session.flush()
            return deleted
