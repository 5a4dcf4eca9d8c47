"""Health check endpoints. Liveness never touches the store; readiness reports it."""

from fastapi import APIRouter

from cached_api.api.v1.dependencies import Cache
from cached_api.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(cache: Cache) -> ReadinessResponse:
    """Return 200 with the cache state.

    An unavailable store degrades the API (every request becomes a miss)
    but does not make it unready, so this never returns 503 for the cache.
    """
    if cache is None:
        state = "disabled"
    elif cache.is_available():
        state = "available"
    else:
        state = "unavailable"
    return ReadinessResponse(cache=state)
