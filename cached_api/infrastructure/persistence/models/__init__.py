"""Persistence models: ORM entities and mixins."""

from cached_api.infrastructure.persistence.models.blog import Blog, BlogComment
from cached_api.infrastructure.persistence.models.mixins import (
    CuidMixin,
    DocumentModel,
    TimestampMixin,
)
from cached_api.infrastructure.persistence.models.payment import Payment
from cached_api.infrastructure.persistence.models.ticket import Ticket

__all__ = [
    "Blog",
    "BlogComment",
    "CuidMixin",
    "DocumentModel",
    "Payment",
    "Ticket",
    "TimestampMixin",
]
