"""Cache: Redis store adapter, key registry and invalidation protocol.

CacheService uses cached_api.core.config; key format is in keys.py and
every mutation invalidates through invalidation.py.
"""

from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.invalidation import (
    CacheInvalidator,
    invalidate,
    normalize_patterns,
)
from cached_api.infrastructure.cache.keys import (
    BLOG_KEYS,
    PAYMENT_KEYS,
    TICKET_KEYS,
    ResourceKeys,
    escape_pattern,
    http_key,
    http_pattern,
)
from cached_api.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "BLOG_KEYS",
    "CacheInvalidator",
    "CacheProtocol",
    "CacheService",
    "PAYMENT_KEYS",
    "ResourceKeys",
    "TICKET_KEYS",
    "escape_pattern",
    "http_key",
    "http_pattern",
    "invalidate",
    "normalize_patterns",
]
