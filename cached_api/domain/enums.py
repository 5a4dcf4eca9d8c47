"""Domain enumerations.

Enums represent fixed sets of domain values. Status and priority values
double as secondary-index components in cache keys (tickets:status:open).
"""

from enum import Enum


class TicketStatus(str, Enum):
    """Support ticket lifecycle status."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Support ticket priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BlogReaction(str, Enum):
    """Reactions a reader can leave on a blog post."""

    LIKE = "like"
    LOVE = "love"
    LAUGH = "laugh"
    SAD = "sad"


class PaymentStatus(str, Enum):
    """Payment lifecycle. Only SUCCEEDED payments can be refunded."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"
