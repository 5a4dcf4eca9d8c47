"""Base repository: generic CRUD with domain-key caching and post-commit invalidation."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cached_api.core.constants import DEFAULT_CACHE_TTL
from cached_api.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.invalidation import CacheInvalidator
from cached_api.infrastructure.cache.keys import ResourceKeys
from cached_api.infrastructure.persistence.database import Base

logger = logging.getLogger(__name__)

Snapshot = dict[str, Any]


class BaseRepository[ModelType: Base]:
    """Base repository with cached reads and mutations that invalidate after commit.

    Reads return JSON-ready snapshots (dicts) so a cached read and a database
    read are indistinguishable. Every mutation commits first, then submits
    the keys the change touched through the resource's CacheInvalidator,
    and awaits it before returning. Subclasses implement _to_dict.
    """

    resource_type: str = "resource"

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        keys: ResourceKeys,
        cache: CacheProtocol | None = None,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        include_transparent: bool = True,
    ) -> None:
        self.db = db
        self.model = model
        self.keys = keys
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.invalidator = CacheInvalidator(
            cache, keys, include_transparent=include_transparent
        )

    def _to_dict(self, obj: ModelType) -> Snapshot:
        """Return the JSON-ready snapshot of obj (also used to derive its cache keys)."""
        raise NotImplementedError

    def _cache_usable(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def _read_through(
        self, key: str, loader: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Return the value cached under key, else load it and cache it.

        None results are not cached, so a missing record is re-checked on
        every read. A store error on either side is logged and the database
        result is served.
        """
        if self._cache_usable():
            try:
                cached = await self.cache.get(key)
            except Exception:
                logger.exception("Cache read failed for %s; loading from database", key)
                cached = None
            if cached is not None:
                return cached
        value = await loader()
        if value is not None and self._cache_usable():
            try:
                await self.cache.set(key, value, ttl=self.cache_ttl)
            except Exception:
                logger.exception("Cache write failed for %s; value not cached", key)
        return value

    async def get_entity(self, entity_id: str) -> ModelType | None:
        """Get ORM entity by primary key for update/delete (bypasses cache)."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def require_entity(self, entity_id: str) -> ModelType:
        """Like get_entity but raises ResourceNotFoundException when missing."""
        obj = await self.get_entity(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.resource_type, entity_id)
        return obj

    def _record_key(self, entity_id: str, facet: str | None = None) -> str:
        """Domain key of a record (or one of its facets).

        Raises:
            ResourceNotFoundException: If entity_id cannot be a key component;
                generated ids always can, so no such record exists.
        """
        try:
            if facet is None:
                return self.keys.by_id(entity_id)
            return self.keys.sub(entity_id, facet)
        except ValueError:
            raise ResourceNotFoundException(self.resource_type, entity_id) from None

    async def get_by_id(self, entity_id: str) -> Snapshot | None:
        """Get record snapshot by ID, from cache (<ns>:<id>) if available."""
        try:
            key = self._record_key(entity_id)
        except ResourceNotFoundException:
            return None

        async def _load() -> Snapshot | None:
            obj = await self.get_entity(entity_id)
            return self._to_dict(obj) if obj else None

        return await self._read_through(key, _load)

    async def list_all(self) -> list[Snapshot]:
        """All records, newest first, from cache (<ns>:all) if available."""

        async def _load() -> list[Snapshot]:
            model: Any = self.model
            result = await self.db.execute(
                select(self.model).order_by(model.updated_at.desc())
            )
            return [self._to_dict(o) for o in result.scalars().all()]

        return await self._read_through(self.keys.all(), _load)

    async def list_by_index(self, index: str, value: str) -> list[Snapshot]:
        """Records whose index field equals value, from cache (<ns>:<index>:<value>)."""
        key = self.keys.by_index(index, value)

        async def _load() -> list[Snapshot]:
            return [self._to_dict(o) for o in await self._query_index(index, value)]

        return await self._read_through(key, _load)

    async def _query_index(self, index: str, value: str) -> Iterable[ModelType]:
        """Load the records of one index bucket. Default: equality on a column of the same name."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(getattr(model, index) == value)
            .order_by(model.updated_at.desc())
        )
        return result.scalars().all()

    async def list_page(
        self, filters: Mapping[str, Any], skip: int = 0, limit: int = 20
    ) -> tuple[list[Snapshot], int]:
        """Filtered page (equality filters, None ignored) and total count. Not domain-cached."""
        model: Any = self.model
        conditions = [getattr(model, k) == v for k, v in filters.items() if v is not None]
        total = await self.db.scalar(
            select(func.count()).select_from(self.model).where(*conditions)
        )
        result = await self.db.execute(
            select(self.model)
            .where(*conditions)
            .order_by(model.updated_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_dict(o) for o in result.scalars().all()], int(total or 0)

    async def _commit(self, obj: ModelType | None = None) -> None:
        await self.db.commit()
        if obj is not None:
            await self.db.refresh(obj)

    async def create(self, obj: ModelType) -> Snapshot:
        """Persist a new record, commit, then invalidate listing and its buckets."""
        self.db.add(obj)
        await self._commit(obj)
        snapshot = self._to_dict(obj)
        await self.invalidator.created(snapshot)
        return snapshot

    async def update(self, obj: ModelType, changes: Mapping[str, Any]) -> Snapshot:
        """Apply changes, commit, then invalidate old and new keys of the record.

        Raises:
            ValidationException: If changes is empty.
        """
        if not changes:
            raise ValidationException("No fields to update")
        before = self._to_dict(obj)
        for field, value in changes.items():
            setattr(obj, field, value)
        await self._commit(obj)
        after = self._to_dict(obj)
        await self.invalidator.updated(before, after)
        return after

    async def delete(self, obj: ModelType) -> None:
        """Delete the record, commit, then invalidate every key it occupied."""
        snapshot = self._to_dict(obj)
        await self.db.delete(obj)
        await self._commit()
        await self.invalidator.deleted(snapshot)
