"""Category repository."""

from __future__ import annotations

import logging

from sqlalchemy import select

from omni.application.dtos import CategoryResult
from omni.infrastructure.persistence.database import Database
from omni.infrastructure.persistence.models import Category
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.shared.utils import ensure_utc


def category_to_result(c: Category) -> CategoryResult:
    return CategoryResult(
        id=c.id,
        tenant_id=c.tenant_id,
        name=c.name,
        description=c.description,
        created_at=ensure_utc(c.created_at),
    )


class CategoryRepository(BaseRepository[Category, CategoryResult]):
    """Category repository. Name is unique per tenant."""

    entity_type = "category"

    def __init__(self, database: Database, *, log: logging.Logger | None = None) -> None:
        super().__init__(database, Category, log=log)

    def _to_result(self, obj: Category) -> CategoryResult:
        return category_to_result(obj)

    async def create_category(
        self, tenant_id: str, name: str, description: str | None = None
    ) -> CategoryResult:
        category = Category(tenant_id=tenant_id, name=name, description=description)
        async with self._transaction(
            "create_category", conflict={"name": name}, tenant_id=tenant_id
        ) as session:
            session.add(category)
            await session.flush()
            await session.refresh(category)
            return category_to_result(category)

    async def list_categories(self, tenant_id: str) -> list[CategoryResult]:
        """All categories of the tenant, by name."""
        stmt = (
            select(Category)
            .where(self._tenant_clause(tenant_id))
            .order_by(Category.name)
        )
        async with self._transaction("list_categories") as session:
            result = await session.execute(stmt)
            return [category_to_result(c) for c in result.scalars().all()]
