"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, TimestampMixin and the combined DocumentModel.
Timestamps are set Python-side (utc_now) so they are available right after
commit without a refresh round-trip.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from cached_api.shared.utils.datetime import utc_now
from cached_api.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware UTC)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            onupdate=utc_now,
            nullable=False,
        )


class DocumentModel(CuidMixin, TimestampMixin):
    """Combined mixin: CUID + created_at/updated_at. Common for resource models."""

    __abstract__ = True
