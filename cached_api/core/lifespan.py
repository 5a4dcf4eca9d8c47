"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, schema, cache, DB
engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from cached_api.core.config import get_settings
from cached_api.infrastructure.persistence.database import dispose_engine, init_models
from cached_api.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, database schema, Redis cache (if enabled).
    A cache that fails to connect stays attached but unavailable, so the
    API starts and serves everything uncached. Shutdown order: cache
    disconnect, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    await init_models()

    if settings.redis_enabled:
        from cached_api.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None
        logger.info("Redis disabled; response cache inactive")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    await dispose_engine()
