"""Cache key builders. Single place for key format and for the set of keys
that reference an entity.

Every key that holds tenant data carries the tenant id; omitting it would
let one tenant resolve another tenant's record. Session token keys are the
exception: tokens are globally unique, so the tenant is implied.

Non-terminal key components (tenant ids, entity ids) must not contain
CACHE_KEY_SEP. The terminal component (email, sku, token) may, since
nothing follows it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import singledispatch

from omni.application.dtos import (
    AccountResult,
    AccountWithSessions,
    ProductResult,
    SessionResult,
    StockResult,
)
from omni.core.constants import (
    CACHE_GLOBAL_TENANT,
    CACHE_KEY_SEP,
    CACHE_PATH_EMAIL,
    CACHE_PATH_LIST,
    CACHE_PATH_PRODUCT,
    CACHE_PATH_SESSIONS,
    CACHE_PATH_SKU,
    CACHE_PATH_TOKEN,
    CACHE_PREFIX_ACCOUNT,
    CACHE_PREFIX_CATEGORY,
    CACHE_PREFIX_PRODUCT,
    CACHE_PREFIX_SESSION,
    CACHE_PREFIX_STOCK,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def _tenant_component(tenant_id: str | None) -> str:
    if tenant_id is None:
        return CACHE_GLOBAL_TENANT
    _validate_key_component(tenant_id, "tenant_id")
    return tenant_id


def _join(*parts: str) -> str:
    return CACHE_KEY_SEP.join(parts)


def account_key(tenant_id: str | None, account_id: str) -> str:
    """Cache key for account by ID (primary)."""
    _validate_key_component(account_id, "account_id")
    return _join(CACHE_PREFIX_ACCOUNT, _tenant_component(tenant_id), account_id)


def account_email_key(tenant_id: str | None, email: str) -> str:
    """Cache key for account by email (secondary, unique per tenant)."""
    if not email:
        raise ValueError("Cache key component 'email' must not be empty")
    return _join(CACHE_PREFIX_ACCOUNT, CACHE_PATH_EMAIL, _tenant_component(tenant_id), email)


def account_sessions_key(tenant_id: str | None, account_id: str) -> str:
    """Cache key for the account-with-sessions view."""
    _validate_key_component(account_id, "account_id")
    return _join(
        CACHE_PREFIX_ACCOUNT, CACHE_PATH_SESSIONS, _tenant_component(tenant_id), account_id
    )


def session_token_key(token: str) -> str:
    """Cache key for session by token (tokens are globally unique)."""
    if not token:
        raise ValueError("Cache key component 'token' must not be empty")
    return _join(CACHE_PREFIX_SESSION, CACHE_PATH_TOKEN, token)


def product_key(tenant_id: str, product_id: str) -> str:
    """Cache key for product by ID (primary)."""
    _validate_key_component(product_id, "product_id")
    return _join(CACHE_PREFIX_PRODUCT, _tenant_component(tenant_id), product_id)


def product_sku_key(tenant_id: str, sku: str) -> str:
    """Cache key for product by SKU (secondary, unique per tenant)."""
    if not sku:
        raise ValueError("Cache key component 'sku' must not be empty")
    return _join(CACHE_PREFIX_PRODUCT, CACHE_PATH_SKU, _tenant_component(tenant_id), sku)


def stock_key(tenant_id: str, stock_id: str) -> str:
    """Cache key for stock record by ID (primary)."""
    _validate_key_component(stock_id, "stock_id")
    return _join(CACHE_PREFIX_STOCK, _tenant_component(tenant_id), stock_id)


def stock_product_key(tenant_id: str, product_id: str) -> str:
    """Cache key for stock record by product (secondary, unique per tenant)."""
    if not product_id:
        raise ValueError("Cache key component 'product_id' must not be empty")
    return _join(
        CACHE_PREFIX_STOCK, CACHE_PATH_PRODUCT, _tenant_component(tenant_id), product_id
    )


def category_list_key(tenant_id: str | None) -> str:
    """Cache key for the tenant's category list (aggregate)."""
    return _join(CACHE_PREFIX_CATEGORY, CACHE_PATH_LIST, _tenant_component(tenant_id))


@dataclass(frozen=True)
class EntityKeys:
    """Every cache key that may hold a copy of one entity.

    primary: key of the canonical by-id entry.
    secondary: keys of the other lookup paths (hold the same entity).
    views: aggregate/collection entries that embed the entity.
    """

    primary: str
    secondary: frozenset[str] = field(default_factory=frozenset)
    views: frozenset[str] = field(default_factory=frozenset)

    @property
    def lookups(self) -> frozenset[str]:
        """Primary plus secondary keys (entries holding the entity itself)."""
        return self.secondary | {self.primary}

    @property
    def all(self) -> frozenset[str]:
        return self.lookups | self.views


@singledispatch
def entity_keys(entity: object) -> EntityKeys:
    """Return the full key set for entity. Write paths invalidate through this."""
    raise TypeError(f"No cache keys defined for {type(entity).__name__}")


@entity_keys.register
def _(entity: AccountResult) -> EntityKeys:
    return EntityKeys(
        primary=account_key(entity.tenant_id, entity.id),
        secondary=frozenset({account_email_key(entity.tenant_id, entity.email)}),
        views=frozenset({account_sessions_key(entity.tenant_id, entity.id)}),
    )


@entity_keys.register
def _(entity: AccountWithSessions) -> EntityKeys:
    return EntityKeys(
        primary=account_sessions_key(entity.account.tenant_id, entity.account.id)
    )


@entity_keys.register
def _(entity: SessionResult) -> EntityKeys:
    return EntityKeys(
        primary=session_token_key(entity.token),
        views=frozenset({account_sessions_key(entity.tenant_id, entity.account_id)}),
    )


@entity_keys.register
def _(entity: ProductResult) -> EntityKeys:
    return EntityKeys(
        primary=product_key(entity.tenant_id, entity.id),
        secondary=frozenset({product_sku_key(entity.tenant_id, entity.sku)}),
    )


@entity_keys.register
def _(entity: StockResult) -> EntityKeys:
    return EntityKeys(
        primary=stock_key(entity.tenant_id, entity.id),
        secondary=frozenset({stock_product_key(entity.tenant_id, entity.product_id)}),
    )
