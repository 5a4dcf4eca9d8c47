"""Blog repository: posts, comments, reactions and the view counter.

Comments and reactions are per-post facets (blogs:<id>:comments,
blogs:<id>:reactions). The view counter lives in the key-value store
(blogs:<id>:views), outside every cached response, so it counts every
view whether or not the post itself is served from cache.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cached_api.core.constants import DEFAULT_CACHE_TTL
from cached_api.domain.exceptions import ResourceNotFoundException
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.invalidation import invalidate
from cached_api.infrastructure.cache.keys import BLOG_KEYS
from cached_api.infrastructure.persistence.models.blog import Blog, BlogComment
from cached_api.infrastructure.persistence.repositories.base import (
    BaseRepository,
    Snapshot,
)
from cached_api.shared.utils.datetime import isoformat_utc

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: BlogComment) -> Snapshot:
    return {
        "id": comment.id,
        "blog_id": comment.blog_id,
        "author": comment.author,
        "content": comment.content,
        "likes": comment.likes,
        "created_at": isoformat_utc(comment.created_at),
    }


class BlogRepository(BaseRepository[Blog]):
    """Blog repository. Indexed by tag (one bucket per tag) and author."""

    resource_type = "blog"

    def __init__(
        self,
        db: AsyncSession,
        cache: CacheProtocol | None = None,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        include_transparent: bool = True,
    ) -> None:
        super().__init__(
            db,
            Blog,
            BLOG_KEYS,
            cache,
            cache_ttl=cache_ttl,
            include_transparent=include_transparent,
        )

    def _to_dict(self, obj: Blog) -> Snapshot:
        return {
            "id": obj.id,
            "title": obj.title,
            "content": obj.content,
            "author": obj.author,
            "tags": list(obj.tags or []),
            "reactions": dict(obj.reactions or {}),
            "created_at": isoformat_utc(obj.created_at),
            "updated_at": isoformat_utc(obj.updated_at),
        }

    async def _query_index(self, index: str, value: str) -> Iterable[Blog]:
        if index != "tag":
            return await super()._query_index(index, value)
        # Tags are a JSON list; filter in Python to stay dialect-neutral.
        result = await self.db.execute(select(Blog).order_by(Blog.updated_at.desc()))
        return [b for b in result.scalars().all() if value in (b.tags or [])]

    async def list_page(
        self, filters: dict[str, Any], skip: int = 0, limit: int = 20
    ) -> tuple[list[Snapshot], int]:
        """Page of posts filtered by author and/or tag."""
        tag = filters.get("tag")
        if tag is None:
            return await super().list_page(filters, skip, limit)
        matching = [
            b
            for b in await self.list_by_index("tag", tag)
            if filters.get("author") is None or b["author"] == filters["author"]
        ]
        return matching[skip : skip + limit], len(matching)

    async def create_blog(
        self, title: str, content: str, author: str, tags: list[str] | None = None
    ) -> Snapshot:
        """Create a post; invalidates blogs:all, its author bucket and each tag bucket."""
        return await self.create(
            Blog(title=title, content=content, author=author, tags=_unique(tags or []))
        )

    async def update_blog(self, blog_id: str, changes: dict[str, Any]) -> Snapshot:
        """Partial update; removed and added tags are both invalidated."""
        blog = await self.require_entity(blog_id)
        # Every post column is required; an explicit null leaves the field as is.
        changes = {k: v for k, v in changes.items() if v is not None}
        if "tags" in changes:
            changes["tags"] = _unique(changes["tags"])
        return await self.update(blog, changes)

    async def delete_blog(self, blog_id: str) -> None:
        """Delete a post with its comments, view counter and cached facets."""
        blog = await self.require_entity(blog_id)
        await self.db.execute(delete(BlogComment).where(BlogComment.blog_id == blog_id))
        await self.delete(blog)

    async def list_comments(self, blog_id: str) -> list[Snapshot]:
        """Comments of a post (oldest first), from cache (blogs:<id>:comments)."""
        await self.require_entity(blog_id)

        async def _load() -> list[Snapshot]:
            result = await self.db.execute(
                select(BlogComment)
                .where(BlogComment.blog_id == blog_id)
                .order_by(BlogComment.created_at.asc())
            )
            return [_comment_to_dict(c) for c in result.scalars().all()]

        return await self._read_through(self._record_key(blog_id, "comments"), _load)

    async def add_comment(self, blog_id: str, author: str, content: str) -> Snapshot:
        """Add a comment; invalidates the post and its comments facet."""
        await self.require_entity(blog_id)
        comment = BlogComment(blog_id=blog_id, author=author, content=content)
        self.db.add(comment)
        await self._commit(comment)
        await self.invalidator.touched(blog_id, "comments")
        return _comment_to_dict(comment)

    async def delete_comment(self, blog_id: str, comment_id: str) -> None:
        """Remove a comment. Raises ResourceNotFoundException if it is not on this post."""
        result = await self.db.execute(
            select(BlogComment).where(
                BlogComment.id == comment_id, BlogComment.blog_id == blog_id
            )
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise ResourceNotFoundException("comment", comment_id)
        await self.db.delete(comment)
        await self._commit()
        await self.invalidator.touched(blog_id, "comments")

    async def get_reactions(self, blog_id: str) -> dict[str, int]:
        """Reaction counts of a post, from cache (blogs:<id>:reactions)."""

        async def _load() -> dict[str, int] | None:
            blog = await self.get_entity(blog_id)
            return dict(blog.reactions or {}) if blog else None

        reactions = await self._read_through(self._record_key(blog_id, "reactions"), _load)
        if reactions is None:
            await self.require_entity(blog_id)
        return reactions or {}

    async def add_reaction(self, blog_id: str, reaction: str) -> Snapshot:
        """Count a reaction. Reactions are embedded in every listing, so this is a
        full update plus the reactions facet."""
        blog = await self.require_entity(blog_id)
        before = self._to_dict(blog)
        reactions = dict(blog.reactions or {})
        reactions[reaction] = int(reactions.get(reaction, 0)) + 1
        blog.reactions = reactions
        await self._commit(blog)
        after = self._to_dict(blog)
        await invalidate(
            self.cache,
            [
                *self.invalidator.patterns_for_update(before, after),
                *self.invalidator.patterns_for_facets(blog_id, "reactions"),
            ],
        )
        return after

    async def record_view(self, blog_id: str) -> int:
        """Increment the post's view counter in the store. Returns the new count.

        Independent of response caching: counts hits and misses alike. With
        the store unavailable or failing the view is not counted and 0 is returned.
        """
        await self.require_entity(blog_id)
        if not self._cache_usable():
            return 0
        key = self._record_key(blog_id, "views")
        try:
            count = await self.cache.incr(key)
        except Exception:
            logger.exception("View counter %s not incremented", key)
            return 0
        return count or 0

    async def get_views(self, blog_id: str) -> int:
        """Current view count (0 when unknown or store unavailable)."""
        await self.require_entity(blog_id)
        if not self._cache_usable():
            return 0
        key = self._record_key(blog_id, "views")
        try:
            return await self.cache.get_counter(key)
        except Exception:
            logger.exception("View counter %s unreadable", key)
            return 0


def _unique(tags: list[str]) -> list[str]:
    return list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))
