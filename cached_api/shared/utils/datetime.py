"""UTC helpers. Stored and cached timestamps are always timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (column default for timestamps)."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize dt to aware UTC.

    SQLite hands back naive datetimes for DateTime(timezone=True) columns;
    those are taken to already be UTC.
    """
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def isoformat_utc(dt: datetime | None) -> str | None:
    """ISO-8601 UTC text for repository snapshots.

    A snapshot read back from the cache and one built from a fresh row
    must serialize identically, so every timestamp goes through here.
    """
    normalized = ensure_utc(dt)
    return normalized.isoformat() if normalized else None
