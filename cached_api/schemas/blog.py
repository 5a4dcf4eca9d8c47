"""Blog API schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from cached_api.domain.enums import BlogReaction
from cached_api.schemas.common import KEY_SAFE_PATTERN, Pagination

Tag = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=1, max_length=50, pattern=KEY_SAFE_PATTERN
    ),
]


class BlogCreateRequest(BaseModel):
    """Request body for creating a blog post."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=255, pattern=KEY_SAFE_PATTERN)
    tags: list[Tag] = Field(default_factory=list, max_length=20)


class BlogUpdate(BaseModel):
    """Request body for updating a blog post (partial)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    author: str | None = Field(
        default=None, min_length=1, max_length=255, pattern=KEY_SAFE_PATTERN
    )
    tags: list[Tag] | None = Field(default=None, max_length=20)


class BlogResponse(BaseModel):
    """Blog post response."""

    id: str
    title: str
    content: str
    author: str
    tags: list[str]
    reactions: dict[str, int]
    created_at: datetime
    updated_at: datetime


class BlogListResponse(BaseModel):
    """Paginated blog list."""

    blogs: list[BlogResponse]
    pagination: Pagination


class CommentCreateRequest(BaseModel):
    """Request body for commenting on a post."""

    author: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    """Comment response."""

    id: str
    blog_id: str
    author: str
    content: str
    likes: int
    created_at: datetime


class ReactionRequest(BaseModel):
    """Request body for reacting to a post."""

    reaction: BlogReaction


class ViewCountResponse(BaseModel):
    """View counter of a post (kept outside the response cache)."""

    blog_id: str
    views: int
