"""Persistence models: ORM entities and mixins."""

from omni.infrastructure.persistence.models.account import Account, AccountSession
from omni.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    NullableTenantMixin,
    TenantMixin,
    TimestampMixin,
)
from omni.infrastructure.persistence.models.product import Category, Product
from omni.infrastructure.persistence.models.stock import Stock

__all__ = [
    "Account",
    "AccountSession",
    "Category",
    "CuidMixin",
    "MultiTenantModel",
    "NullableTenantMixin",
    "Product",
    "Stock",
    "TenantMixin",
    "TimestampMixin",
]
