"""Payments API: record, list, get and refund.

Transparent entries under /api/v1/payments use the 60s route TTL
(settings.cache_route_ttls); domain keys use PAYMENT_CACHE_TTL.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from cached_api.api.v1.dependencies import Page, get_payment_repo
from cached_api.domain.enums import PaymentStatus
from cached_api.domain.exceptions import ResourceNotFoundException
from cached_api.infrastructure.persistence.repositories import PaymentRepository
from cached_api.schemas.common import KEY_SAFE_PATTERN, Pagination
from cached_api.schemas.payment import (
    PaymentCreateRequest,
    PaymentListResponse,
    PaymentResponse,
)

router = APIRouter()

Repo = Annotated[PaymentRepository, Depends(get_payment_repo)]


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(body: PaymentCreateRequest, repo: Repo):
    """Record a payment (processor integration is external)."""
    created = await repo.create_payment(
        customer=body.customer,
        amount=body.amount,
        currency=body.currency,
        description=body.description,
    )
    return PaymentResponse.model_validate(created)


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    repo: Repo,
    customer: str | None = None,
    status: PaymentStatus | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List payments with optional customer/status filters."""
    items, total = await repo.list_page(
        {"customer": customer, "status": status.value if status else None},
        skip=(page - 1) * limit,
        limit=limit,
    )
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/customer/{customer}", response_model=list[PaymentResponse])
async def list_customer_payments(
    customer: Annotated[str, Path(pattern=KEY_SAFE_PATTERN)], repo: Repo, page: Page
):
    """Payments of a customer, one page (bucket cached as payments:customer:<email>)."""
    items = await repo.list_by_index("customer", customer)
    return [PaymentResponse.model_validate(p) for p in page.slice(items)]


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str, repo: Repo):
    """Get payment by id."""
    payment = await repo.get_by_id(payment_id)
    if payment is None:
        raise ResourceNotFoundException("payment", payment_id)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(payment_id: str, repo: Repo):
    """Refund a succeeded payment."""
    refunded = await repo.refund(payment_id)
    return PaymentResponse.model_validate(refunded)
