"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
See cached_api.core.lifespan and cached_api.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cached_api.api.v1 import api_router
from cached_api.core.config import get_settings
from cached_api.core.exception_handlers import register_exception_handlers
from cached_api.core.lifespan import create_lifespan
from cached_api.middleware import ResponseCacheMiddleware


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    # Middleware: last added = outermost. CORS wraps the cache so hits carry CORS headers too.
    app.add_middleware(
        ResponseCacheMiddleware,
        default_ttl=settings.cache_default_ttl,
        route_ttls=settings.cache_route_ttls,
        force_param=settings.cache_force_param,
        path_prefixes=tuple(settings.cache_path_prefixes),
        exclude_paths=tuple(settings.cache_exclude_paths),
        max_body_size=settings.cache_max_body_bytes,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
