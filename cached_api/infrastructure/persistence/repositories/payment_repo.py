"""Payment repository. Short domain-key TTL (financial data)."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from cached_api.core.constants import PAYMENT_CACHE_TTL
from cached_api.domain.enums import PaymentStatus
from cached_api.domain.exceptions import InvalidStateTransitionException
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.keys import PAYMENT_KEYS
from cached_api.infrastructure.persistence.models.payment import Payment
from cached_api.infrastructure.persistence.repositories.base import (
    BaseRepository,
    Snapshot,
)
from cached_api.shared.utils.datetime import isoformat_utc, utc_now


class PaymentRepository(BaseRepository[Payment]):
    """Payment repository. Indexed by customer and status."""

    resource_type = "payment"

    def __init__(
        self,
        db: AsyncSession,
        cache: CacheProtocol | None = None,
        *,
        cache_ttl: int = PAYMENT_CACHE_TTL,
        include_transparent: bool = True,
    ) -> None:
        super().__init__(
            db,
            Payment,
            PAYMENT_KEYS,
            cache,
            cache_ttl=cache_ttl,
            include_transparent=include_transparent,
        )

    def _to_dict(self, obj: Payment) -> Snapshot:
        return {
            "id": obj.id,
            "customer": obj.customer,
            "amount": obj.amount,
            "currency": obj.currency,
            "description": obj.description,
            "status": obj.status,
            "refunded_at": isoformat_utc(obj.refunded_at),
            "created_at": isoformat_utc(obj.created_at),
            "updated_at": isoformat_utc(obj.updated_at),
        }

    async def create_payment(
        self,
        customer: str,
        amount: int,
        currency: str = "usd",
        description: str | None = None,
    ) -> Snapshot:
        """Record a succeeded payment (the processor call is out of scope)."""
        payment = Payment(
            customer=customer,
            amount=amount,
            currency=currency.lower(),
            description=description,
            status=PaymentStatus.SUCCEEDED.value,
        )
        return await self.create(payment)

    async def refund(self, payment_id: str) -> Snapshot:
        """Mark a succeeded payment refunded; invalidates both status buckets.

        Raises:
            ResourceNotFoundException: If the payment does not exist.
            InvalidStateTransitionException: If the payment is not SUCCEEDED.
        """
        payment = await self.require_entity(payment_id)
        if payment.status != PaymentStatus.SUCCEEDED.value:
            raise InvalidStateTransitionException(
                "payment", payment.status, PaymentStatus.REFUNDED.value
            )
        return await self.update(
            payment,
            {"status": PaymentStatus.REFUNDED.value, "refunded_at": utc_now()},
        )
