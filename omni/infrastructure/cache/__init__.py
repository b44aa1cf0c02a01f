"""Cache: Redis service, codec and cache key utilities.

Used by the cache-aside service. CacheService reads connection settings from
omni.core.config; key format lives in keys.py.
"""

from omni.infrastructure.cache.cache_protocol import MISSING, CacheProtocol
from omni.infrastructure.cache.keys import (
    EntityKeys,
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
from omni.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "MISSING",
    "CacheProtocol",
    "CacheService",
    "EntityKeys",
    "account_email_key",
    "account_key",
    "account_sessions_key",
    "category_list_key",
    "entity_keys",
    "product_key",
    "product_sku_key",
    "session_token_key",
    "stock_key",
    "stock_product_key",
]
