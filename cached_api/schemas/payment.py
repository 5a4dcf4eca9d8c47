"""Payment API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from cached_api.domain.enums import PaymentStatus
from cached_api.schemas.common import KEY_SAFE_PATTERN, Pagination


class PaymentCreateRequest(BaseModel):
    """Request body for recording a payment."""

    customer: str = Field(..., min_length=3, max_length=320, pattern=KEY_SAFE_PATTERN)
    amount: int = Field(..., gt=0, description="Amount in minor units (cents)")
    currency: str = Field(default="usd", min_length=3, max_length=3)
    description: str | None = Field(default=None, max_length=500)


class PaymentResponse(BaseModel):
    """Payment response."""

    id: str
    customer: str
    amount: int
    currency: str
    description: str | None
    status: PaymentStatus
    refunded_at: datetime | None
    created_at: datetime
    updated_at: datetime


class PaymentListResponse(BaseModel):
    """Paginated payment list."""

    payments: list[PaymentResponse]
    pagination: Pagination
