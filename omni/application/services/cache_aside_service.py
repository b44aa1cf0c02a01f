"""Cache-aside service: read-through and write-through/invalidate over the repositories.

Reads try the cache first and fall back to the relational store, populating
the cache on the way out (negative results are never cached). Writes go to
the relational store first; only after it succeeds is the cache reconciled,
always through entity_keys() so every lookup path and aggregate view that
could hold a stale copy is dropped or repopulated.

Repository errors propagate unchanged (ConstraintViolationException,
ResourceNotFoundException, TransportException). Cache failures never do:
the cache fails open and this service only logs what it could not populate.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

from omni.application.dtos import (
    AccountCreate,
    AccountResult,
    AccountUpdate,
    AccountWithSessions,
    CategoryResult,
    ProductCreate,
    ProductResult,
    ProductUpdate,
    SessionCreate,
    SessionResult,
    StockCreate,
    StockResult,
    StockUpdate,
)
from omni.application.interfaces import (
    IAccountRepository,
    ICategoryRepository,
    IProductRepository,
    ISessionRepository,
    IStockRepository,
)
from omni.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from omni.domain.enums import AccountRole, AccountStatus, ProductStatus
from omni.domain.exceptions import ResourceNotFoundException, ValidationException
from omni.infrastructure.cache.cache_protocol import MISSING, CacheProtocol
from omni.infrastructure.cache.keys import (
    account_email_key,
    account_key,
    account_sessions_key,
    category_list_key,
    entity_keys,
    product_key,
    product_sku_key,
    session_token_key,
    stock_key,
    stock_product_key,
)
from omni.shared.utils import seconds_until, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheOptions:
    """Per-call cache behaviour.

    use_cache=False skips cache reads and populates; invalidation after a
    write still runs. ttl overrides the service default for entries written
    by this call.
    """

    use_cache: bool = True
    ttl: int | None = None


_DEFAULT_OPTIONS = CacheOptions()


def _validate_page(limit: int, offset: int) -> None:
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        raise ValidationException(
            f"limit must be between 1 and {MAX_PAGE_LIMIT}", field="limit"
        )
    if offset < 0:
        raise ValidationException("offset must not be negative", field="offset")


def _validate_non_negative(values: dict[str, Any], *names: str) -> None:
    for name in names:
        value = values.get(name)
        if value is not None and value < 0:
            raise ValidationException(f"{name} must not be negative", field=name)


class CacheAsideService:
    """Cached data access for accounts, sessions, products, stock and categories.

    One method per entity and lookup path plus create/update/delete. All
    methods take the tenant first (None for single-tenant accounts) except
    token lookups, where the tenant is implied by the globally unique token.
    Missing entities raise ResourceNotFoundException.
    """

    def __init__(
        self,
        cache: CacheProtocol | None,
        accounts: IAccountRepository,
        sessions: ISessionRepository,
        products: IProductRepository,
        stocks: IStockRepository,
        categories: ICategoryRepository,
        *,
        default_ttl: int = 3600,
        session_ttl: int = 900,
        clock: Callable[[], datetime] = utc_now,
        log: logging.Logger | None = None,
    ) -> None:
        self.cache = cache
        self.accounts = accounts
        self.sessions = sessions
        self.products = products
        self.stocks = stocks
        self.categories = categories
        self.default_ttl = default_ttl
        self.session_ttl = session_ttl
        self._clock = clock
        self.logger = log or logger

    # Cache plumbing

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    def _use(self, options: CacheOptions) -> bool:
        return options.use_cache and self._cache_ready()

    def _ttl(self, options: CacheOptions) -> int:
        return options.ttl if options.ttl is not None else self.default_ttl

    async def _populate(self, keys: Iterable[str], value: Any, ttl: int) -> None:
        """Write value under every key. A key that cannot be written is dropped."""
        assert self.cache is not None
        for key in sorted(keys):
            if not await self.cache.set(key, value, ttl):
                self.logger.warning("Cache populate failed for %s; dropping key", key)
                await self.cache.delete(key)

    async def _evict(self, keys: Iterable[str]) -> None:
        if not self._cache_ready():
            return
        assert self.cache is not None
        for key in sorted(keys):
            await self.cache.delete(key)

    async def _read_through(
        self,
        key: str,
        as_type: Any,
        load: Callable[[], Awaitable[T | None]],
        options: CacheOptions,
    ) -> T | None:
        """Return the entity under key, loading and caching it on a miss.

        On a miss the loaded entity is stored under key and under its
        primary key, so a lookup by a secondary path also warms the by-id
        entry. None (not found) is returned uncached.
        """
        if self._use(options):
            cached = await self.cache.get(key, as_type)  # type: ignore[union-attr]
            if cached is not MISSING:
                return cached
        entity = await load()
        if entity is not None and self._use(options):
            await self._populate(
                {key, entity_keys(entity).primary}, entity, self._ttl(options)
            )
        return entity

    async def _after_create(
        self, entity: Any, options: CacheOptions, ttl: int | None = None
    ) -> None:
        """Cache a new entity under its lookup keys and drop views that embed it.

        A non-positive ttl means the entity must not be cached at all.
        """
        keys = entity_keys(entity)
        if ttl is None:
            ttl = self._ttl(options)
        if self._use(options) and ttl > 0:
            await self._populate(keys.lookups, entity, ttl)
        else:
            await self._evict(keys.lookups)
        await self._evict(keys.views)

    async def _after_update(self, before: Any, after: Any, options: CacheOptions) -> None:
        """Reconcile the cache after a committed update.

        Lookup keys the old values produced but the new ones do not (e.g. the
        old email) are dropped; the current lookup keys get the new entity;
        views embedding either version are dropped.
        """
        old, new = entity_keys(before), entity_keys(after)
        await self._evict(old.lookups - new.lookups)
        if self._use(options):
            await self._populate(new.lookups, after, self._ttl(options))
        else:
            await self._evict(new.lookups)
        await self._evict(old.views | new.views)

    # Accounts

    async def get_account(
        self, tenant_id: str | None, account_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> AccountResult:
        account = await self._read_through(
            account_key(tenant_id, account_id),
            AccountResult,
            lambda: self.accounts.get_account(tenant_id, account_id),
            options,
        )
        if account is None:
            raise ResourceNotFoundException("account", account_id)
        return account

    async def get_account_by_email(
        self, tenant_id: str | None, email: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> AccountResult:
        account = await self._read_through(
            account_email_key(tenant_id, email),
            AccountResult,
            lambda: self.accounts.get_account_by_email(tenant_id, email),
            options,
        )
        if account is None:
            raise ResourceNotFoundException("account", email)
        return account

    async def get_account_with_sessions(
        self, tenant_id: str | None, account_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> AccountWithSessions:
        """Return the account and its live sessions.

        The cached view may embed sessions that have since expired, so it is
        filtered against the clock on every read.
        """
        now = self._clock()
        view = await self._read_through(
            account_sessions_key(tenant_id, account_id),
            AccountWithSessions,
            lambda: self.accounts.get_account_with_sessions(tenant_id, account_id, now),
            options,
        )
        if view is None:
            raise ResourceNotFoundException("account", account_id)
        return view.live(now)

    async def create_account(
        self, tenant_id: str | None, data: AccountCreate, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> AccountResult:
        if not data.email:
            raise ValidationException("email is required", field="email")
        account = await self.accounts.create_account(tenant_id, data)
        await self._after_create(account, options)
        self.logger.info("Account %s created (tenant=%s)", account.id, tenant_id)
        return account

    async def update_account(
        self,
        tenant_id: str | None,
        account_id: str,
        update: AccountUpdate,
        options: CacheOptions = _DEFAULT_OPTIONS,
    ) -> AccountResult:
        changes = update.changes()
        if not changes:
            return await self.get_account(tenant_id, account_id, options)
        if "email" in changes and not changes["email"]:
            raise ValidationException("email must not be empty", field="email")
        before, after = await self.accounts.update_account(tenant_id, account_id, changes)
        await self._after_update(before, after, options)
        return after

    async def delete_account(self, tenant_id: str | None, account_id: str) -> None:
        """Delete the account and its sessions; evict every key referencing them."""
        deleted = await self.accounts.delete_account(tenant_id, account_id)
        keys = set(entity_keys(deleted.account).all)
        for session in deleted.sessions:
            keys |= entity_keys(session).all
        await self._evict(keys)
        self.logger.info(
            "Account %s deleted with %d session(s) (tenant=%s)",
            account_id,
            len(deleted.sessions),
            tenant_id,
        )

    async def list_accounts(
        self,
        tenant_id: str | None,
        *,
        role: AccountRole | None = None,
        status: AccountStatus | None = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> list[AccountResult]:
        """List accounts straight from the store (filtered pages are not cached)."""
        _validate_page(limit, offset)
        return await self.accounts.list_accounts(
            tenant_id, role=role, status=status, limit=limit, offset=offset
        )

    # Sessions

    def _session_ttl(self, session: SessionResult, now: datetime, options: CacheOptions) -> int:
        """Cache TTL for a session: never past its own expiry (<= 0 means do not cache)."""
        ttl = options.ttl if options.ttl is not None else self.session_ttl
        return min(ttl, seconds_until(session.expires_at, now))

    async def get_session_by_token(
        self, token: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> SessionResult:
        """Return the live session for token.

        An expired session is deleted from the store (and its cache keys
        evicted) and reported as not found. Repeating the call is harmless.
        """
        now = self._clock()
        key = session_token_key(token)
        if self._use(options):
            cached = await self.cache.get(key, SessionResult)  # type: ignore[union-attr]
            if cached is not MISSING:
                if cached.is_live(now):
                    return cached
                await self.sessions.delete_session_by_token(token)
                await self._evict(entity_keys(cached).all)
                raise ResourceNotFoundException("session", "token")
        session = await self.sessions.get_session_by_token(token, now)
        if session is None:
            raise ResourceNotFoundException("session", "token")
        ttl = self._session_ttl(session, now, options)
        if self._use(options) and ttl > 0:
            await self._populate({key}, session, ttl)
        return session

    async def create_session(
        self, tenant_id: str | None, data: SessionCreate, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> SessionResult:
        """Create a session; the owning account's sessions view is invalidated."""
        if not data.token:
            raise ValidationException("token is required", field="token")
        session = await self.sessions.create_session(tenant_id, data)
        ttl = self._session_ttl(session, self._clock(), options)
        await self._after_create(session, options, ttl)
        return session

    async def delete_session(self, token: str) -> None:
        deleted = await self.sessions.delete_session_by_token(token)
        if deleted is None:
            raise ResourceNotFoundException("session", "token")
        await self._evict(entity_keys(deleted).all)

    # Products

    async def get_product(
        self, tenant_id: str, product_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> ProductResult:
        product = await self._read_through(
            product_key(tenant_id, product_id),
            ProductResult,
            lambda: self.products.get_product(tenant_id, product_id),
            options,
        )
        if product is None:
            raise ResourceNotFoundException("product", product_id)
        return product

    async def get_product_by_sku(
        self, tenant_id: str, sku: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> ProductResult:
        product = await self._read_through(
            product_sku_key(tenant_id, sku),
            ProductResult,
            lambda: self.products.get_product_by_sku(tenant_id, sku),
            options,
        )
        if product is None:
            raise ResourceNotFoundException("product", sku)
        return product

    async def create_product(
        self, tenant_id: str, data: ProductCreate, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> ProductResult:
        if not data.sku:
            raise ValidationException("sku is required", field="sku")
        _validate_non_negative({"price": data.price}, "price")
        product = await self.products.create_product(tenant_id, data)
        await self._after_create(product, options)
        return product

    async def update_product(
        self,
        tenant_id: str,
        product_id: str,
        update: ProductUpdate,
        options: CacheOptions = _DEFAULT_OPTIONS,
    ) -> ProductResult:
        changes = update.changes()
        if not changes:
            return await self.get_product(tenant_id, product_id, options)
        if "sku" in changes and not changes["sku"]:
            raise ValidationException("sku must not be empty", field="sku")
        _validate_non_negative(changes, "price")
        before, after = await self.products.update_product(tenant_id, product_id, changes)
        await self._after_update(before, after, options)
        return after

    async def delete_product(self, tenant_id: str, product_id: str) -> None:
        """Delete the product and its stock record; evict keys of both."""
        product, stock = await self.products.delete_product(tenant_id, product_id)
        keys = set(entity_keys(product).all)
        if stock is not None:
            keys |= entity_keys(stock).all
        await self._evict(keys)

    async def list_products(
        self,
        tenant_id: str,
        *,
        status: ProductStatus | None = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> list[ProductResult]:
        _validate_page(limit, offset)
        return await self.products.list_products(
            tenant_id, status=status, limit=limit, offset=offset
        )

    # Stock

    async def get_stock(
        self, tenant_id: str, stock_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> StockResult:
        stock = await self._read_through(
            stock_key(tenant_id, stock_id),
            StockResult,
            lambda: self.stocks.get_stock(tenant_id, stock_id),
            options,
        )
        if stock is None:
            raise ResourceNotFoundException("stock", stock_id)
        return stock

    async def get_stock_by_product(
        self, tenant_id: str, product_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> StockResult:
        stock = await self._read_through(
            stock_product_key(tenant_id, product_id),
            StockResult,
            lambda: self.stocks.get_stock_by_product(tenant_id, product_id),
            options,
        )
        if stock is None:
            raise ResourceNotFoundException("stock", product_id)
        return stock

    async def create_stock(
        self, tenant_id: str, data: StockCreate, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> StockResult:
        """Create the stock record of a product. Nothing is reserved yet."""
        _validate_non_negative(vars(data), "quantity", "reorder_level", "max_stock_level")
        stock = await self.stocks.create_stock(tenant_id, data, available_qty=data.quantity)
        await self._after_create(stock, options)
        return stock

    async def update_stock(
        self,
        tenant_id: str,
        product_id: str,
        update: StockUpdate,
        options: CacheOptions = _DEFAULT_OPTIONS,
    ) -> StockResult:
        """Update the product's stock record.

        When quantity or reserved_qty changes, available_qty is recomputed
        from the current row, since the store does not maintain it.
        """
        changes = update.changes()
        _validate_non_negative(
            changes, "quantity", "reserved_qty", "reorder_level", "max_stock_level"
        )
        if not changes:
            return await self.get_stock_by_product(tenant_id, product_id, options)
        if "quantity" in changes or "reserved_qty" in changes:
            current = await self.stocks.get_stock_by_product(tenant_id, product_id)
            if current is None:
                raise ResourceNotFoundException("stock", product_id)
            quantity = changes.get("quantity", current.quantity)
            reserved = changes.get("reserved_qty", current.reserved_qty)
            if reserved > quantity:
                raise ValidationException(
                    "reserved_qty must not exceed quantity", field="reserved_qty"
                )
            changes["available_qty"] = quantity - reserved
        before, after = await self.stocks.update_stock(tenant_id, product_id, changes)
        await self._after_update(before, after, options)
        return after

    async def delete_stock(self, tenant_id: str, product_id: str) -> None:
        deleted = await self.stocks.delete_stock(tenant_id, product_id)
        await self._evict(entity_keys(deleted).all)

    # Categories

    async def create_category(
        self, tenant_id: str, name: str, description: str | None = None
    ) -> CategoryResult:
        """Create a category; the tenant's cached category list is dropped."""
        if not name:
            raise ValidationException("name is required", field="name")
        category = await self.categories.create_category(tenant_id, name, description)
        await self._evict({category_list_key(tenant_id)})
        return category

    async def list_categories(
        self, tenant_id: str, options: CacheOptions = _DEFAULT_OPTIONS
    ) -> list[CategoryResult]:
        key = category_list_key(tenant_id)
        if self._use(options):
            cached = await self.cache.get(key, list[CategoryResult])  # type: ignore[union-attr]
            if cached is not MISSING:
                return cached
        categories = await self.categories.list_categories(tenant_id)
        if self._use(options):
            await self._populate({key}, categories, self._ttl(options))
        return categories

    # Operator tooling

    async def flush_cache(self) -> bool:
        """Drop every cached entry in the namespace. Not used by request paths."""
        if not self._cache_ready():
            return False
        assert self.cache is not None
        flushed = await self.cache.flush()
        self.logger.warning("Cache flush requested: %s", "ok" if flushed else "failed")
        return flushed
