"""Pydantic request/response schemas for the API."""

from cached_api.schemas.blog import BlogCreateRequest, BlogResponse
from cached_api.schemas.cache import InvalidateRequest, InvalidateResponse
from cached_api.schemas.health import HealthResponse, ReadinessResponse
from cached_api.schemas.payment import PaymentCreateRequest, PaymentResponse
from cached_api.schemas.ticket import TicketCreateRequest, TicketResponse

__all__ = [
    "BlogCreateRequest",
    "BlogResponse",
    "HealthResponse",
    "InvalidateRequest",
    "InvalidateResponse",
    "PaymentCreateRequest",
    "PaymentResponse",
    "ReadinessResponse",
    "TicketCreateRequest",
    "TicketResponse",
]
