"""Product (catalog item) repository."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from omni.application.dtos import ProductCreate, ProductResult, StockResult
from omni.domain.enums import ProductStatus
from omni.domain.exceptions import ResourceNotFoundException
from omni.infrastructure.persistence.database import Database
from omni.infrastructure.persistence.models import Category, Product
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.infrastructure.persistence.repositories.stock_repo import stock_to_result
from omni.shared.utils import ensure_utc


def product_to_result(p: Product) -> ProductResult:
    """Map ORM Product to application ProductResult."""
    return ProductResult(
        id=p.id,
        tenant_id=p.tenant_id,
        sku=p.sku,
        name=p.name,
        description=p.description,
        price=p.price,
        status=ProductStatus(p.status),
        category_id=p.category_id,
        created_at=ensure_utc(p.created_at),
        updated_at=ensure_utc(p.updated_at),
    )


class ProductRepository(BaseRepository[Product, ProductResult]):
    """Product repository. SKU is unique per tenant."""

    entity_type = "product"

    def __init__(self, database: Database, *, log: logging.Logger | None = None) -> None:
        super().__init__(database, Product, log=log)

    def _to_result(self, obj: Product) -> ProductResult:
        return product_to_result(obj)

    async def _check_references(
        self, session: AsyncSession, tenant_id: str | None, values: dict[str, Any]
    ) -> None:
        category_id = values.get("category_id")
        if category_id is None:
            return
        found = await session.execute(
            select(Category.id).where(
                Category.id == category_id, Category.tenant_id == tenant_id
            )
        )
        if found.scalar_one_or_none() is None:
            raise ResourceNotFoundException("category", category_id)

    async def create_product(self, tenant_id: str, data: ProductCreate) -> ProductResult:
        """Create product; its category, when set, must belong to the same tenant."""
        product = Product(
            tenant_id=tenant_id,
            sku=data.sku,
            name=data.name,
            description=data.description,
            price=data.price,
            status=data.status.value,
            category_id=data.category_id,
        )
        async with self._transaction(
            "create_product", conflict={"sku": data.sku}, tenant_id=tenant_id
        ) as session:
            await self._check_references(session, tenant_id, {"category_id": data.category_id})
            session.add(product)
            await session.flush()
            await session.refresh(product)
            return product_to_result(product)

    async def get_product(self, tenant_id: str, product_id: str) -> ProductResult | None:
        return await self._find(
            "get_product", self._tenant_clause(tenant_id), Product.id == product_id
        )

    async def get_product_by_sku(self, tenant_id: str, sku: str) -> ProductResult | None:
        return await self._find(
            "get_product_by_sku", self._tenant_clause(tenant_id), Product.sku == sku
        )

    async def update_product(
        self, tenant_id: str, product_id: str, changes: dict[str, object]
    ) -> tuple[ProductResult, ProductResult]:
        """Apply changes; return (before, after).

        Raises:
            ResourceNotFoundException: product, or the new category, not in tenant.
            ConstraintViolationException: new SKU already used in tenant.
        """
        return await self._update(
            "update_product",
            tenant_id,
            Product.id == product_id,
            product_id,
            changes,
            unique_fields=("sku",),
        )

    async def delete_product(
        self, tenant_id: str, product_id: str
    ) -> tuple[ProductResult, StockResult | None]:
        """Delete the product and its stock record.

        Returns:
            (deleted product, deleted stock record or None).
        """
        async with self._transaction("delete_product", tenant_id=tenant_id) as session:
            product = await self._get_one(
                session,
                self._tenant_clause(tenant_id),
                Product.id == product_id,
                options=[selectinload(Product.stock)],
            )
            if product is None:
                raise ResourceNotFoundException(self.entity_type, product_id)
            stock = stock_to_result(product.stock) if product.stock is not None else None
            deleted = product_to_result(product)
            await session.delete(product)
            await session.flush()
            return deleted, stock

    async def list_products(
        self,
        tenant_id: str,
        *,
        status: ProductStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductResult]:
        """List tenant products ordered by name."""
        stmt = select(Product).where(self._tenant_clause(tenant_id))
        if status is not None:
            stmt = stmt.where(Product.status == status.value)
        stmt = stmt.order_by(Product.name, Product.id).offset(offset).limit(limit)
        async with self._transaction("list_products") as session:
            result = await session.execute(stmt)
            return [product_to_result(p) for p in result.scalars().all()]
