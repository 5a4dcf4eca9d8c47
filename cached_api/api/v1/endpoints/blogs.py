"""Blogs API: posts, comments, reactions and view counts.

Comment and reaction writes invalidate the post, its facet key and the
transparent cache:/api/v1/blogs* entries. The /views routes are excluded
from the response cache (settings.cache_exclude_paths) and read the store
counter directly.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from cached_api.api.v1.dependencies import Page, get_blog_repo
from cached_api.domain.exceptions import ResourceNotFoundException
from cached_api.infrastructure.persistence.repositories import BlogRepository
from cached_api.schemas.blog import (
    BlogCreateRequest,
    BlogListResponse,
    BlogResponse,
    BlogUpdate,
    CommentCreateRequest,
    CommentResponse,
    ReactionRequest,
    ViewCountResponse,
)
from cached_api.schemas.common import KEY_SAFE_PATTERN, MessageResponse, Pagination

router = APIRouter()

Repo = Annotated[BlogRepository, Depends(get_blog_repo)]
KeySafe = Annotated[str, Path(pattern=KEY_SAFE_PATTERN)]


@router.post("", response_model=BlogResponse, status_code=201)
async def create_blog(body: BlogCreateRequest, repo: Repo):
    """Publish a post."""
    created = await repo.create_blog(
        title=body.title, content=body.content, author=body.author, tags=body.tags
    )
    return BlogResponse.model_validate(created)


@router.get("", response_model=BlogListResponse)
async def list_blogs(
    repo: Repo,
    tag: Annotated[str | None, Query(pattern=KEY_SAFE_PATTERN)] = None,
    author: Annotated[str | None, Query(pattern=KEY_SAFE_PATTERN)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List posts (paginated) with optional tag and author filters."""
    items, total = await repo.list_page(
        {"tag": tag, "author": author}, skip=(page - 1) * limit, limit=limit
    )
    return BlogListResponse(
        blogs=[BlogResponse.model_validate(b) for b in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/tag/{tag}", response_model=list[BlogResponse])
async def list_blogs_by_tag(tag: KeySafe, repo: Repo, page: Page):
    """Posts carrying a tag, one page (bucket cached as blogs:tag:<tag>)."""
    items = await repo.list_by_index("tag", tag)
    return [BlogResponse.model_validate(b) for b in page.slice(items)]


@router.get("/author/{author}", response_model=list[BlogResponse])
async def list_blogs_by_author(author: KeySafe, repo: Repo, page: Page):
    """Posts by an author, one page (bucket cached as blogs:author:<author>)."""
    items = await repo.list_by_index("author", author)
    return [BlogResponse.model_validate(b) for b in page.slice(items)]


@router.get("/{blog_id}", response_model=BlogResponse)
async def get_blog(blog_id: str, repo: Repo):
    """Get post by id."""
    blog = await repo.get_by_id(blog_id)
    if blog is None:
        raise ResourceNotFoundException("blog", blog_id)
    return BlogResponse.model_validate(blog)


@router.put("/{blog_id}", response_model=BlogResponse)
async def update_blog(blog_id: str, body: BlogUpdate, repo: Repo):
    """Update post fields (partial)."""
    changes = body.model_dump(exclude_unset=True, mode="json")
    updated = await repo.update_blog(blog_id, changes)
    return BlogResponse.model_validate(updated)


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_blog(blog_id: str, repo: Repo):
    """Delete a post with its comments and counters."""
    await repo.delete_blog(blog_id)
    return MessageResponse(message="Blog deleted successfully")


@router.get("/{blog_id}/comments", response_model=list[CommentResponse])
async def list_comments(blog_id: str, repo: Repo):
    """Comments of a post, oldest first."""
    comments = await repo.list_comments(blog_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post("/{blog_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(blog_id: str, body: CommentCreateRequest, repo: Repo):
    """Comment on a post."""
    comment = await repo.add_comment(blog_id, author=body.author, content=body.content)
    return CommentResponse.model_validate(comment)


@router.delete("/{blog_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(blog_id: str, comment_id: str, repo: Repo):
    """Remove a comment from a post."""
    await repo.delete_comment(blog_id, comment_id)
    return MessageResponse(message="Comment deleted successfully")


@router.get("/{blog_id}/reactions", response_model=dict[str, int])
async def get_reactions(blog_id: str, repo: Repo):
    """Reaction counts of a post."""
    return await repo.get_reactions(blog_id)


@router.post("/{blog_id}/reactions", response_model=BlogResponse)
async def add_reaction(blog_id: str, body: ReactionRequest, repo: Repo):
    """React to a post."""
    updated = await repo.add_reaction(blog_id, body.reaction.value)
    return BlogResponse.model_validate(updated)


@router.post("/{blog_id}/views", response_model=ViewCountResponse)
async def record_view(blog_id: str, repo: Repo):
    """Count a view. Never served from the response cache."""
    views = await repo.record_view(blog_id)
    return ViewCountResponse(blog_id=blog_id, views=views)


@router.get("/{blog_id}/views", response_model=ViewCountResponse)
async def get_views(blog_id: str, repo: Repo):
    """Current view count of a post."""
    views = await repo.get_views(blog_id)
    return ViewCountResponse(blog_id=blog_id, views=views)
