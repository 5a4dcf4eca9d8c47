"""Core constants: cache key prefixes, TTLs and shared literal values.

Single source of truth for cache key structure. Used by
infrastructure.cache.keys and the read-through middleware.
"""

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Namespace of transparent keys (cache:<path>?<query>). Reserved: no resource may use it.
CACHE_PREFIX_HTTP = "cache"

# Resource namespaces for domain keys (<ns>:all, <ns>:<id>, <ns>:<index>:<value>)
CACHE_PREFIX_TICKETS = "tickets"
CACHE_PREFIX_BLOGS = "blogs"
CACHE_PREFIX_PAYMENTS = "payments"

# Suffix of the aggregate listing key
CACHE_ALL_SUFFIX = "all"

# TTLs in seconds
DEFAULT_CACHE_TTL = 300
PAYMENT_CACHE_TTL = 60

# Query parameter that opts a non-GET request into transparent caching
FORCE_CACHE_PARAM = "forceCache"

# Response header reporting HIT / MISS on cache-eligible requests
CACHE_STATUS_HEADER = "X-Cache"

# Keys per SCAN batch / UNLINK chunk in pattern deletion
CACHE_DELETE_CHUNK_SIZE = 500

# Largest response body (bytes) the read-through cache buffers and stores
DEFAULT_CACHE_MAX_BODY_BYTES = 1_048_576
