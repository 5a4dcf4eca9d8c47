"""Ticket API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from cached_api.domain.enums import TicketPriority, TicketStatus
from cached_api.schemas.common import KEY_SAFE_PATTERN, Pagination


class TicketCreateRequest(BaseModel):
    """Request body for creating a ticket."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority | None = None
    assignee: str | None = Field(default=None, max_length=255, pattern=KEY_SAFE_PATTERN)


class TicketUpdate(BaseModel):
    """Request body for updating a ticket (partial)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assignee: str | None = Field(default=None, max_length=255, pattern=KEY_SAFE_PATTERN)


class TicketStatusUpdate(BaseModel):
    """Request body for PATCH /{ticket_id}/status."""

    status: TicketStatus


class TicketResponse(BaseModel):
    """Ticket detail response."""

    id: str
    identifier: str
    title: str
    description: str | None
    status: TicketStatus
    priority: TicketPriority
    assignee: str | None
    created_at: datetime
    updated_at: datetime


class TicketListResponse(BaseModel):
    """Paginated ticket list."""

    tickets: list[TicketResponse]
    pagination: Pagination
