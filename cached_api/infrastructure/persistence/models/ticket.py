"""Ticket ORM model. Support tickets indexed by status, priority and assignee."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cached_api.domain.enums import TicketPriority, TicketStatus
from cached_api.infrastructure.persistence.database import Base
from cached_api.infrastructure.persistence.models.mixins import DocumentModel
from cached_api.shared.utils.generators import generate_identifier


class Ticket(DocumentModel, Base):
    """Ticket. Table: ticket. identifier is a short public reference."""

    __tablename__ = "ticket"

    identifier: Mapped[str] = mapped_column(
        String, nullable=False, unique=True, default=generate_identifier
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TicketStatus.OPEN.value, index=True
    )
    priority: Mapped[str] = mapped_column(
        String, nullable=False, default=TicketPriority.MEDIUM.value, index=True
    )
    assignee: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
