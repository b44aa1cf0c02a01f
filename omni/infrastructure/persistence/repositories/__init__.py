"""Repositories: tenant-scoped CRUD over the relational store, returning application DTOs."""

from omni.infrastructure.persistence.repositories.account_repo import AccountRepository
from omni.infrastructure.persistence.repositories.base import BaseRepository
from omni.infrastructure.persistence.repositories.category_repo import CategoryRepository
from omni.infrastructure.persistence.repositories.product_repo import ProductRepository
from omni.infrastructure.persistence.repositories.session_repo import SessionRepository
from omni.infrastructure.persistence.repositories.stock_repo import StockRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "CategoryRepository",
    "ProductRepository",
    "SessionRepository",
    "StockRepository",
]
