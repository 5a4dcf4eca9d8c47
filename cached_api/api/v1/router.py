"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from cached_api.api.v1.dependencies (no manual repo construction).
"""

from fastapi import APIRouter

from cached_api.api.v1.endpoints import blogs, cache, health, payments, tickets

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(blogs.router, prefix="/blogs", tags=["blogs"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
