"""Shared utilities: datetime and generators."""

from cached_api.shared.utils.datetime import ensure_utc, isoformat_utc, utc_now
from cached_api.shared.utils.generators import generate_cuid, generate_identifier

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "generate_identifier",
    "isoformat_utc",
    "utc_now",
]
