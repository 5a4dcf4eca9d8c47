"""HTTP middleware: read-through response cache.

Applied in main app ahead of the API router. Import and use from cached_api.main.
"""

from cached_api.middleware.response_cache import ResponseCacheMiddleware, resolve_ttl

__all__ = ["ResponseCacheMiddleware", "resolve_ttl"]
