"""Persistence repositories. Re-exports for dependency injection."""

from cached_api.infrastructure.persistence.repositories.base import BaseRepository
from cached_api.infrastructure.persistence.repositories.blog_repo import BlogRepository
from cached_api.infrastructure.persistence.repositories.payment_repo import (
    PaymentRepository,
)
from cached_api.infrastructure.persistence.repositories.ticket_repo import (
    TicketRepository,
)

__all__ = [
    "BaseRepository",
    "BlogRepository",
    "PaymentRepository",
    "TicketRepository",
]
