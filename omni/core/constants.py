"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure. Used by
omni.infrastructure.cache.keys and the cache-aside service.
"""

# Cache key prefixes
CACHE_PREFIX_ACCOUNT = "account"
CACHE_PREFIX_SESSION = "session"
CACHE_PREFIX_PRODUCT = "product"
CACHE_PREFIX_STOCK = "stock"
CACHE_PREFIX_CATEGORY = "category"

# Lookup path segments
CACHE_PATH_EMAIL = "email"
CACHE_PATH_SESSIONS = "sessions"
CACHE_PATH_TOKEN = "token"
CACHE_PATH_SKU = "sku"
CACHE_PATH_PRODUCT = "product"
CACHE_PATH_LIST = "list"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Key component standing in for tenant_id=None (single-tenant deployments).
# Empty, so no real tenant id (validated non-empty) can produce it.
CACHE_GLOBAL_TENANT = ""

# Pagination defaults for list operations
DEFAULT_PAGE_LIMIT = 100
MAX_PAGE_LIMIT = 500
