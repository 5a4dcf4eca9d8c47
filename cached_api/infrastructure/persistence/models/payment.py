"""Payment ORM model. Amounts are integer minor units (cents)."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cached_api.domain.enums import PaymentStatus
from cached_api.infrastructure.persistence.database import Base
from cached_api.infrastructure.persistence.models.mixins import DocumentModel


class Payment(DocumentModel, Base):
    """Payment. Table: payment. customer is the payer's email."""

    __tablename__ = "payment"

    customer: Mapped[str] = mapped_column(String, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=PaymentStatus.SUCCEEDED.value, index=True
    )
    refunded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
