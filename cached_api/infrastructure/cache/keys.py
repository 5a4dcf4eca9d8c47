"""Cache key builders. Single place for key format.

Two namespaces coexist and never collide:

- transparent keys, cache:<path>?<query>, built by the read-through
  middleware from the request identity;
- domain keys, <resource>:all / <resource>:<id> / <resource>:<index>:<value>
  / <resource>:<id>:<facet>, built only through a ResourceKeys registry so
  every reader and every writer of a logical key agrees on its shape.

Key components (ids, index values, facets) must not contain CACHE_KEY_SEP
to avoid ambiguous or colliding keys.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cached_api.core.constants import (
    CACHE_ALL_SUFFIX,
    CACHE_KEY_SEP,
    CACHE_PREFIX_BLOGS,
    CACHE_PREFIX_HTTP,
    CACHE_PREFIX_PAYMENTS,
    CACHE_PREFIX_TICKETS,
)

_GLOB_SPECIAL = "\\*?[]"


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def escape_pattern(key: str) -> str:
    """Escape glob metacharacters so a literal key matches only itself as a pattern."""
    return "".join(f"\\{c}" if c in _GLOB_SPECIAL else c for c in key)


def http_key(path: str, query_string: str = "") -> str:
    """Transparent cache key for a request: cache:<path>[?<query>]."""
    if query_string:
        return f"{CACHE_PREFIX_HTTP}{CACHE_KEY_SEP}{path}?{query_string}"
    return f"{CACHE_PREFIX_HTTP}{CACHE_KEY_SEP}{path}"


def http_pattern(path_prefix: str) -> str:
    """Pattern matching every transparent key under path_prefix (any query)."""
    return f"{CACHE_PREFIX_HTTP}{CACHE_KEY_SEP}{escape_pattern(path_prefix)}*"


def _index_values(value: Any) -> list[str]:
    """Normalize a record field into the index values it occupies.

    None and empty strings occupy no bucket; list-like fields (e.g. tags)
    occupy one bucket per element; enums use their value.
    """
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        out: list[str] = []
        for item in value:
            out.extend(_index_values(item))
        return out
    if isinstance(value, Enum):
        return [str(value.value)]
    return [str(value)]


@dataclass(frozen=True)
class ResourceKeys:
    """Key registry for one resource.

    Attributes:
        namespace: Resource prefix (e.g. "tickets").
        indexes: Secondary-index field names; each yields <ns>:<index>:<value>.
        facets: Per-record sub-collections (e.g. "comments") -> <ns>:<id>:<facet>.
        route: API path the resource is mounted at, for transparent invalidation.
        fields: (index, record field) pairs where the record field name differs
            from the index name (e.g. ("tag", "tags")).
    """

    namespace: str
    indexes: tuple[str, ...] = ()
    facets: tuple[str, ...] = ()
    route: str | None = None
    fields: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        _validate_key_component(self.namespace, "namespace")
        if self.namespace == CACHE_PREFIX_HTTP:
            raise ValueError(
                f"Namespace {CACHE_PREFIX_HTTP!r} is reserved for transparent HTTP keys"
            )
        for name in (*self.indexes, *self.facets):
            _validate_key_component(name, "index/facet")
            if name == CACHE_ALL_SUFFIX:
                raise ValueError(f"Index or facet may not be named {CACHE_ALL_SUFFIX!r}")
        if set(self.indexes) & set(self.facets):
            raise ValueError("Index and facet names must be distinct")

    def _key(self, *parts: str) -> str:
        return CACHE_KEY_SEP.join((self.namespace, *parts))

    def all(self) -> str:
        """Key for the aggregate listing of the resource."""
        return self._key(CACHE_ALL_SUFFIX)

    def by_id(self, record_id: str) -> str:
        """Key for a single record."""
        _validate_key_component(record_id, "id")
        if record_id == CACHE_ALL_SUFFIX or record_id in self.indexes:
            raise ValueError(f"Record id {record_id!r} collides with a reserved key segment")
        return self._key(record_id)

    def by_index(self, index: str, value: str) -> str:
        """Key for the bucket of records whose index field equals value."""
        if index not in self.indexes:
            raise ValueError(f"Unknown index {index!r} for {self.namespace}")
        values = _index_values(value)
        if len(values) != 1:
            raise ValueError(f"Index {index!r} needs exactly one value, got {value!r}")
        _validate_key_component(values[0], index)
        return self._key(index, values[0])

    def sub(self, record_id: str, facet: str) -> str:
        """Key for a per-record sub-collection (e.g. blogs:<id>:comments)."""
        if facet not in self.facets:
            raise ValueError(f"Unknown facet {facet!r} for {self.namespace}")
        return CACHE_KEY_SEP.join((self.by_id(record_id), facet))

    def transparent(self) -> str | None:
        """Pattern for every transparent entry under the resource's route."""
        return http_pattern(self.route) if self.route else None

    def index_keys(self, record: Mapping[str, Any]) -> list[str]:
        """Every secondary-index bucket key the record currently occupies."""
        field_names = dict(self.fields)
        keys: list[str] = []
        for index in self.indexes:
            for value in _index_values(record.get(field_names.get(index, index))):
                keys.append(self.by_index(index, value))
        return keys

    def keys_for(
        self, record: Mapping[str, Any], *, include_facets: bool = False
    ) -> list[str]:
        """Keys a record appears under: listing, by-id, and each index bucket.

        Args:
            record: Field snapshot of the record; must include "id".
            include_facets: Also include <ns>:<id>:<facet> keys (on delete).
        """
        record_id = str(record["id"])
        keys = [self.all(), self.by_id(record_id), *self.index_keys(record)]
        if include_facets:
            keys.extend(self.sub(record_id, facet) for facet in self.facets)
        return keys

    def keys_for_change(
        self, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> list[str]:
        """Keys touched by an update: union of both snapshots' keys.

        A changed index field yields both the old and the new value's bucket;
        an unchanged one yields its (single) bucket, since that bucket's
        cached listing embeds the record.
        """
        return _dedupe([*self.keys_for(before), *self.keys_for(after)])


def _dedupe(keys: Iterable[str]) -> list[str]:
    """Drop duplicates preserving first-seen order."""
    return list(dict.fromkeys(keys))


TICKET_KEYS = ResourceKeys(
    CACHE_PREFIX_TICKETS,
    indexes=("status", "priority", "assignee"),
    route="/api/v1/tickets",
)

BLOG_KEYS = ResourceKeys(
    CACHE_PREFIX_BLOGS,
    indexes=("tag", "author"),
    facets=("comments", "reactions", "views"),
    route="/api/v1/blogs",
    fields=(("tag", "tags"),),
)

PAYMENT_KEYS = ResourceKeys(
    CACHE_PREFIX_PAYMENTS,
    indexes=("customer", "status"),
    route="/api/v1/payments",
)
