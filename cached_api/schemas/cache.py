"""Cache administration API schemas."""

from pydantic import BaseModel, Field


class InvalidateRequest(BaseModel):
    """Request body for POST /cache/invalidate. Empty entries are ignored."""

    patterns: list[str] = Field(..., max_length=100)


class InvalidateResponse(BaseModel):
    """Result of an invalidation run."""

    patterns: list[str]
    removed: int
