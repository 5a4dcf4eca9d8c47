"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

The document store is an external collaborator of the cache layer; any
SQLAlchemy async URL works (SQLite via aiosqlite by default). Schema is
created with metadata.create_all at startup.

Engine and session factory are created lazily on first use so import does
not trigger Settings validation. Sessions do not auto-commit: repositories
commit explicitly and only then invalidate the cache.
"""

import logging
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from cached_api.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: Any = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if settings.database_url.startswith("sqlite") and ":memory:" in settings.database_url:
        # One shared connection, otherwise every session sees its own empty database.
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
    engine = create_async_engine(settings.database_url, **kwargs)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models() -> None:
    """Create all tables (idempotent). Called from the application lifespan."""
    from cached_api.infrastructure.persistence import models  # noqa: F401  (register tables)

    _ensure_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def dispose_engine() -> None:
    """Dispose the engine and forget the session factory (shutdown and tests)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session dependency.

    Yields a session and closes it on exit. Uncommitted work is rolled back
    on close; mutating repositories commit before invalidating the cache.
    """
    _ensure_engine()
    assert AsyncSessionLocal is not None
    async with AsyncSessionLocal() as session:
        yield session
