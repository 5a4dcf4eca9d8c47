"""Schemas shared by resource endpoints."""

from pydantic import BaseModel, Field

# Index values become cache key components and may not contain the key separator.
KEY_SAFE_PATTERN = r"^[^:]+$"


class Pagination(BaseModel):
    """Pagination block of list responses."""

    total: int
    page: int
    pages: int
    limit: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, pages=-(-total // limit), limit=limit)


class MessageResponse(BaseModel):
    """Plain acknowledgement (e.g. after delete)."""

    message: str = Field(..., description="Human-readable result")
