"""Ticket repository. Domain keys from TICKET_KEYS; status changes invalidate both buckets."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cached_api.core.constants import DEFAULT_CACHE_TTL
from cached_api.domain.enums import TicketStatus
from cached_api.domain.exceptions import InvalidStateTransitionException
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.keys import TICKET_KEYS
from cached_api.infrastructure.persistence.models.ticket import Ticket
from cached_api.infrastructure.persistence.repositories.base import (
    BaseRepository,
    Snapshot,
)
from cached_api.shared.utils.datetime import isoformat_utc

# Closed tickets can only be reopened; everything else may move freely.
_ALLOWED_FROM_CLOSED = {TicketStatus.OPEN.value, TicketStatus.CLOSED.value}
_NULLABLE_FIELDS = {"description", "assignee"}


class TicketRepository(BaseRepository[Ticket]):
    """Ticket repository. Optional cache (inject cache_ttl)."""

    resource_type = "ticket"

    def __init__(
        self,
        db: AsyncSession,
        cache: CacheProtocol | None = None,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        include_transparent: bool = True,
    ) -> None:
        super().__init__(
            db,
            Ticket,
            TICKET_KEYS,
            cache,
            cache_ttl=cache_ttl,
            include_transparent=include_transparent,
        )

    def _to_dict(self, obj: Ticket) -> Snapshot:
        return {
            "id": obj.id,
            "identifier": obj.identifier,
            "title": obj.title,
            "description": obj.description,
            "status": obj.status,
            "priority": obj.priority,
            "assignee": obj.assignee,
            "created_at": isoformat_utc(obj.created_at),
            "updated_at": isoformat_utc(obj.updated_at),
        }

    async def create_ticket(
        self,
        title: str,
        description: str | None = None,
        status: str = TicketStatus.OPEN.value,
        priority: str | None = None,
        assignee: str | None = None,
    ) -> Snapshot:
        """Create a ticket; invalidates tickets:all and the buckets it joins."""
        fields: dict[str, Any] = {
            "title": title,
            "description": description,
            "status": status,
            "assignee": assignee,
        }
        if priority is not None:
            fields["priority"] = priority
        return await self.create(Ticket(**fields))

    async def update_ticket(self, ticket_id: str, changes: dict[str, Any]) -> Snapshot:
        """Partial update. Raises ResourceNotFoundException if missing."""
        ticket = await self.require_entity(ticket_id)
        changes = {
            k: v for k, v in changes.items() if v is not None or k in _NULLABLE_FIELDS
        }
        if "status" in changes:
            _check_transition(ticket.status, changes["status"])
        return await self.update(ticket, changes)

    async def change_status(self, ticket_id: str, status: str) -> Snapshot:
        """Move a ticket to status; old and new status buckets are both invalidated."""
        ticket = await self.require_entity(ticket_id)
        _check_transition(ticket.status, status)
        return await self.update(ticket, {"status": status})

    async def delete_ticket(self, ticket_id: str) -> None:
        """Delete a ticket. Raises ResourceNotFoundException if missing."""
        ticket = await self.require_entity(ticket_id)
        await self.delete(ticket)


def _check_transition(current: str, requested: str) -> None:
    if current == TicketStatus.CLOSED.value and requested not in _ALLOWED_FROM_CLOSED:
        raise InvalidStateTransitionException("ticket", current, requested)
