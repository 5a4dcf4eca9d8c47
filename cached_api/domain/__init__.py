"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation.
"""

from cached_api.domain.enums import (
    BlogReaction,
    PaymentStatus,
    TicketPriority,
    TicketStatus,
)
from cached_api.domain.exceptions import (
    CachedApiException,
    CacheSerializationError,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "BlogReaction",
    "CachedApiException",
    "CacheSerializationError",
    "InvalidStateTransitionException",
    "PaymentStatus",
    "ResourceNotFoundException",
    "TicketPriority",
    "TicketStatus",
    "ValidationException",
]
