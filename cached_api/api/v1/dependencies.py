"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the shared cache and the
resource repositories. Routes depend only on these dependencies, not on
infrastructure construction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, TypeVar

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cached_api.core.config import Settings, get_settings
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.persistence.database import get_db
from cached_api.infrastructure.persistence.repositories import (
    BlogRepository,
    PaymentRepository,
    TicketRepository,
)


def get_cache(request: Request) -> CacheProtocol | None:
    """Shared cache from app.state (None when Redis is disabled)."""
    return getattr(request.app.state, "cache", None)


DbSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[CacheProtocol | None, Depends(get_cache)]
AppSettings = Annotated[Settings, Depends(get_settings)]

T = TypeVar("T")


class PageParams:
    """page/limit of a listing read whole from one domain key.

    The bucket is cached and read in full; the page is sliced afterwards so
    the key stays one per bucket.
    """

    def __init__(self, page: int = 1, limit: int = 20) -> None:
        self.page = page
        self.limit = limit

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def slice(self, items: Sequence[T]) -> list[T]:
        return list(items[self.skip : self.skip + self.limit])


def get_page(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PageParams:
    """page/limit query parameters for per-index listings."""
    return PageParams(page, limit)


Page = Annotated[PageParams, Depends(get_page)]


def get_ticket_repo(db: DbSession, cache: Cache, settings: AppSettings) -> TicketRepository:
    """Ticket repository bound to the request session and shared cache."""
    return TicketRepository(
        db,
        cache,
        cache_ttl=settings.cache_default_ttl,
        include_transparent=settings.cache_invalidate_transparent_keys,
    )


def get_blog_repo(db: DbSession, cache: Cache, settings: AppSettings) -> BlogRepository:
    """Blog repository bound to the request session and shared cache."""
    return BlogRepository(
        db,
        cache,
        cache_ttl=settings.cache_default_ttl,
        include_transparent=settings.cache_invalidate_transparent_keys,
    )


def get_payment_repo(
    db: DbSession, cache: Cache, settings: AppSettings
) -> PaymentRepository:
    """Payment repository; keeps its short default TTL."""
    return PaymentRepository(
        db,
        cache,
        include_transparent=settings.cache_invalidate_transparent_keys,
    )
