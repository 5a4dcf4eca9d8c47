"""Cache administration: explicit invalidation by key or glob pattern.

Excluded from the response cache. Patterns use the store's glob syntax
(e.g. "tickets:status:*", "cache:/api/v1/blogs*").
"""

from fastapi import APIRouter

from cached_api.api.v1.dependencies import Cache
from cached_api.infrastructure.cache.invalidation import invalidate, normalize_patterns
from cached_api.schemas.cache import InvalidateRequest, InvalidateResponse

router = APIRouter()


@router.post("/invalidate", response_model=InvalidateResponse)
async def invalidate_cache(body: InvalidateRequest, cache: Cache) -> InvalidateResponse:
    """Delete every entry matching the submitted patterns.

    Empty entries are dropped; an empty list issues no store calls. Failures
    on individual patterns are logged and do not fail the request.
    """
    patterns = normalize_patterns(body.patterns)
    removed = await invalidate(cache, patterns)
    return InvalidateResponse(patterns=patterns, removed=removed)
