"""Domain enumerations for the Omni back office.

Enums represent fixed sets of domain values (account role and status,
product status). Stored as their string values.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AccountRole(_ValuesMixin, str, Enum):
    """Role of a tenant account in the back office."""

    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"
    SALESPERSON = "SALESPERSON"


class AccountStatus(_ValuesMixin, str, Enum):
    """Account lifecycle status. Only ACTIVE accounts should be issued sessions."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class ProductStatus(_ValuesMixin, str, Enum):
    """Catalog item status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DISCONTINUED = "DISCONTINUED"
