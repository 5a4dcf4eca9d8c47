"""Tickets API: CRUD, status changes, and per-index listings.

Every mutation commits, then invalidates tickets:all, tickets:<id> and
each status/priority/assignee bucket touched (old and new values), plus
the transparent cache:/api/v1/tickets* entries.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from cached_api.api.v1.dependencies import Page, get_ticket_repo
from cached_api.domain.enums import TicketPriority, TicketStatus
from cached_api.domain.exceptions import ResourceNotFoundException
from cached_api.infrastructure.persistence.repositories import TicketRepository
from cached_api.schemas.common import KEY_SAFE_PATTERN, MessageResponse, Pagination
from cached_api.schemas.ticket import (
    TicketCreateRequest,
    TicketListResponse,
    TicketResponse,
    TicketStatusUpdate,
    TicketUpdate,
)

router = APIRouter()

Repo = Annotated[TicketRepository, Depends(get_ticket_repo)]


@router.post("", response_model=TicketResponse, status_code=201)
async def create_ticket(body: TicketCreateRequest, repo: Repo):
    """Create a ticket."""
    created = await repo.create_ticket(
        title=body.title,
        description=body.description,
        status=body.status.value,
        priority=body.priority.value if body.priority else None,
        assignee=body.assignee,
    )
    return TicketResponse.model_validate(created)


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    repo: Repo,
    status: TicketStatus | None = None,
    priority: TicketPriority | None = None,
    assignee: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List tickets (paginated, newest activity first) with optional filters."""
    items, total = await repo.list_page(
        {
            "status": status.value if status else None,
            "priority": priority.value if priority else None,
            "assignee": assignee,
        },
        skip=(page - 1) * limit,
        limit=limit,
    )
    return TicketListResponse(
        tickets=[TicketResponse.model_validate(t) for t in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/status/{status}", response_model=list[TicketResponse])
async def list_tickets_by_status(status: TicketStatus, repo: Repo, page: Page):
    """Tickets with a status, one page (bucket cached as tickets:status:<status>)."""
    items = await repo.list_by_index("status", status.value)
    return [TicketResponse.model_validate(t) for t in page.slice(items)]


@router.get("/priority/{priority}", response_model=list[TicketResponse])
async def list_tickets_by_priority(priority: TicketPriority, repo: Repo, page: Page):
    """Tickets with a priority, one page (bucket cached as tickets:priority:<priority>)."""
    items = await repo.list_by_index("priority", priority.value)
    return [TicketResponse.model_validate(t) for t in page.slice(items)]


@router.get("/assignee/{assignee}", response_model=list[TicketResponse])
async def list_tickets_by_assignee(
    assignee: Annotated[str, Path(pattern=KEY_SAFE_PATTERN)], repo: Repo, page: Page
):
    """Tickets assigned to someone, one page (bucket cached as tickets:assignee:<assignee>)."""
    items = await repo.list_by_index("assignee", assignee)
    return [TicketResponse.model_validate(t) for t in page.slice(items)]


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, repo: Repo):
    """Get ticket by id."""
    ticket = await repo.get_by_id(ticket_id)
    if ticket is None:
        raise ResourceNotFoundException("ticket", ticket_id)
    return TicketResponse.model_validate(ticket)


@router.put("/{ticket_id}", response_model=TicketResponse)
async def update_ticket(ticket_id: str, body: TicketUpdate, repo: Repo):
    """Update ticket fields (partial)."""
    changes = body.model_dump(exclude_unset=True, mode="json")
    updated = await repo.update_ticket(ticket_id, changes)
    return TicketResponse.model_validate(updated)


@router.patch("/{ticket_id}/status", response_model=TicketResponse)
async def change_ticket_status(ticket_id: str, body: TicketStatusUpdate, repo: Repo):
    """Change ticket status."""
    updated = await repo.change_status(ticket_id, body.status.value)
    return TicketResponse.model_validate(updated)


@router.delete("/{ticket_id}", response_model=MessageResponse)
async def delete_ticket(ticket_id: str, repo: Repo):
    """Delete a ticket."""
    await repo.delete_ticket(ticket_id)
    return MessageResponse(message="Ticket deleted successfully")
