"""Invalidation protocol: delete every cache entry a committed mutation touched.

Mutating handlers call invalidate() (directly or through a CacheInvalidator)
after the underlying store write is committed, never before, and await it
before returning the response. Deletion is best-effort per pattern: a
failing pattern is logged and the remaining ones are still processed, and
nothing is raised to the caller. Deletes are idempotent, so a partial or
repeated run can only leave extra staleness (bounded by TTL), never a
corrupted entry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.keys import ResourceKeys, escape_pattern

logger = logging.getLogger(__name__)


def normalize_patterns(patterns: Iterable[str | None]) -> list[str]:
    """Drop falsy entries and duplicates, keeping submission order."""
    return list(dict.fromkeys(p for p in patterns if p))


async def invalidate(
    cache: CacheProtocol | None, patterns: Iterable[str | None]
) -> int:
    """Delete every entry matching any of patterns. Returns total keys removed.

    Callers build the list conditionally, so empty/None entries are filtered
    before submission; an empty result (or an unavailable store) issues no
    store calls.

    Args:
        cache: Cache backend (None when caching is disabled).
        patterns: Keys or glob patterns (Redis SCAN MATCH syntax).

    Returns:
        Number of keys removed across all patterns.
    """
    to_delete = normalize_patterns(patterns)
    if not to_delete or cache is None or not cache.is_available():
        return 0
    total = 0
    for pattern in to_delete:
        try:
            removed = await cache.delete_pattern(pattern)
        except Exception:
            logger.exception("Cache invalidation failed for pattern %s", pattern)
            continue
        logger.debug("Invalidated %s cache keys matching %s", removed, pattern)
        total += removed
    logger.info(
        "Cache invalidation: %s keys removed for %s patterns", total, len(to_delete)
    )
    return total


class CacheInvalidator:
    """Builds and submits the pattern list for one resource's mutations.

    Every pattern comes from the resource's ResourceKeys registry, so the
    keys a write deletes are exactly the keys readers populate. Literal
    domain keys are glob-escaped; when include_transparent is set, the
    resource's cache:<route>* pattern is added so HTTP-path entries
    (populated by the read-through middleware) are invalidated too.
    """

    def __init__(
        self,
        cache: CacheProtocol | None,
        keys: ResourceKeys,
        *,
        include_transparent: bool = True,
    ) -> None:
        self.cache = cache
        self.keys = keys
        self.include_transparent = include_transparent

    def _patterns(self, keys: Iterable[str]) -> list[str | None]:
        patterns: list[str | None] = [escape_pattern(k) for k in keys]
        if self.include_transparent:
            patterns.append(self.keys.transparent())
        return patterns

    def patterns_for_create(self, record: Mapping[str, Any]) -> list[str]:
        """Listing, new record, and each index bucket the record joins."""
        return normalize_patterns(self._patterns(self.keys.keys_for(record)))

    def patterns_for_update(
        self, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> list[str]:
        """Listing, record, and old and new buckets of every index field."""
        return normalize_patterns(
            self._patterns(self.keys.keys_for_change(before, after))
        )

    def patterns_for_delete(self, record: Mapping[str, Any]) -> list[str]:
        """Listing, record, its buckets, and its per-record facets."""
        return normalize_patterns(
            self._patterns(self.keys.keys_for(record, include_facets=True))
        )

    def patterns_for_facets(self, record_id: str, *facets: str) -> list[str]:
        """Record key plus the given facets (e.g. comments after a new comment)."""
        keys = [self.keys.by_id(record_id)]
        keys.extend(self.keys.sub(record_id, facet) for facet in facets)
        return normalize_patterns(self._patterns(keys))

    async def created(self, record: Mapping[str, Any]) -> int:
        """Invalidate after a committed create."""
        return await invalidate(self.cache, self.patterns_for_create(record))

    async def updated(
        self, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> int:
        """Invalidate after a committed update or status change."""
        return await invalidate(self.cache, self.patterns_for_update(before, after))

    async def deleted(self, record: Mapping[str, Any]) -> int:
        """Invalidate after a committed delete."""
        return await invalidate(self.cache, self.patterns_for_delete(record))

    async def touched(self, record_id: str, *facets: str) -> int:
        """Invalidate after a committed change to a record's sub-collection."""
        return await invalidate(
            self.cache, self.patterns_for_facets(record_id, *facets)
        )
