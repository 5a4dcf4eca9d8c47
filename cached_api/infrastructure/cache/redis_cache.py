"""Redis-based key-value store adapter for the response cache.

Provides async Redis caching with TTL support. Used by the read-through
middleware (transparent keys), by repositories (domain keys) and by the
invalidation protocol (pattern deletes). Every operation degrades instead
of raising: a store that is down behaves like an empty cache.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from cached_api.core.config import Settings, get_settings
from cached_api.core.constants import CACHE_DELETE_CHUNK_SIZE, DEFAULT_CACHE_TTL
from cached_api.domain.exceptions import CacheSerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# redis-py raises its own TimeoutError for socket timeouts; asyncio raises the builtin one.
_CONNECTIVITY_ERRORS = (redis.ConnectionError, redis.TimeoutError, TimeoutError)


def serialize(key: str, value: Any) -> str:
    """Return the JSON text stored for value.

    Raises:
        CacheSerializationError: If value is not JSON-representable.
    """
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise CacheSerializationError(key, str(e)) from e


class CacheService:
    """Async Redis cache service with TTL support.

    Uses cached_api.core.config for connection settings (host, port, db,
    password, TLS flag, socket timeouts). Call connect() at startup and
    disconnect() at shutdown. Values are JSON; entries are only ever fully
    replaced (SETEX) or deleted, never partially updated.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI. An injected
                client is never replaced on reconnect.
            settings: Optional settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._owns_client = redis_client is None
        self._connected = False
        self._closed = False
        self._last_connect_attempt: float | None = None

    def _build_client(self) -> redis.Redis:
        s = self.settings
        return redis.Redis(
            host=s.redis_host,
            port=s.redis_port,
            db=s.redis_db,
            password=s.redis_password.get_secret_value() if s.redis_password else None,
            ssl=s.redis_tls,
            decode_responses=True,
            socket_connect_timeout=s.redis_connect_timeout,
            socket_timeout=s.redis_socket_timeout,
            socket_keepalive=True,
        )

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup.

        On failure the service stays unavailable (cache disabled) instead of
        failing startup; the next attempt is made once
        settings.redis_reconnect_interval has elapsed.
        """
        self._closed = False
        self._last_connect_attempt = time.monotonic()
        if self.redis is None:
            self.redis = self._build_client()
        try:
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s (tls=%s)",
                self.settings.redis_host,
                self.settings.redis_port,
                self.settings.redis_tls,
            )
        except (*_CONNECTIVITY_ERRORS, redis.RedisError) as e:
            logger.warning(
                "Redis connection failed: %s. Cache disabled; retrying in %ss.",
                e,
                self.settings.redis_reconnect_interval,
            )
            self._connected = False
            if self._owns_client:
                await self._close_quietly()
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown; no reconnects afterwards."""
        self._closed = True
        self._connected = False
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis cache disconnected")

    async def _close_quietly(self) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.aclose()
        except (*_CONNECTIVITY_ERRORS, redis.RedisError):
            logger.debug("Ignoring error while closing Redis client", exc_info=True)

    async def _reconnect(self) -> bool:
        """Reconnect and return True on success.

        A client built by this service is rebuilt; an injected client is
        only pinged again, never replaced.
        """
        if self._owns_client:
            await self._close_quietly()
            self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def _reconnect_due(self) -> bool:
        if self._closed or self._last_connect_attempt is None:
            return False
        elapsed = time.monotonic() - self._last_connect_attempt
        return elapsed >= self.settings.redis_reconnect_interval

    def is_available(self) -> bool:
        """Return True if Redis is connected, or disconnected with a reconnect attempt due.

        In the second case the next operation tries to reconnect first, so
        a store that comes back is picked up again (writes resume
        invalidating the shared store) without a restart.
        """
        return (self._connected and self.redis is not None) or self._reconnect_due()

    async def _execute(
        self,
        op: str,
        target: str,
        call: Callable[[redis.Redis], Awaitable[T]],
        default: T,
    ) -> T:
        """Run call against the client, retrying once after a reconnect.

        Connectivity errors and timeouts are logged as warnings; any other
        store error is logged with traceback. Both return default.
        """
        if not (self._connected and self.redis is not None):
            if not self._reconnect_due() or not await self._reconnect():
                return default
        assert self.redis is not None
        try:
            return await call(self.redis)
        except _CONNECTIVITY_ERRORS:
            if await self._reconnect() and self.redis is not None:
                try:
                    return await call(self.redis)
                except (*_CONNECTIVITY_ERRORS, redis.RedisError):
                    logger.exception("Cache %s error for %s after reconnect", op, target)
                    return default
            logger.warning("Cache %s unavailable for %s (Redis disconnected)", op, target)
            return default
        except redis.RedisError:
            logger.exception("Cache %s error for %s", op, target)
            return default

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable.

        Args:
            key: Cache key (use infrastructure.cache.keys builders).

        Returns:
            Cached value or None. Undecodable stored text counts as a miss.
        """
        raw = await self._execute("get", key, lambda r: r.get(key), None)
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Cache value for %s is not valid JSON; treating as miss", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> bool:
        """Store value with TTL. Returns True on success.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable).
            ttl: Time-to-live in seconds (default 300). Expiry is enforced by Redis.

        Returns:
            True if stored, False otherwise (unavailable, store error, or
            value not serializable).
        """
        try:
            serialized = serialize(key, value)
        except CacheSerializationError as e:
            logger.warning("Cache SET skipped: %s", e.message)
            return False

        async def _setex(r: redis.Redis) -> bool:
            await r.setex(key, ttl, serialized)
            return True

        stored = await self._execute("set", key, _setex, False)
        if stored:
            logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return stored

    async def delete(self, key: str) -> int:
        """Remove key from cache. Returns number of keys deleted (0 or 1).

        Args:
            key: Cache key to delete.
        """
        removed = await self._execute("delete", key, lambda r: r.delete(key), 0)
        logger.debug("Cache DELETE: %s (%s)", key, removed)
        return int(removed or 0)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking).

        Uses scan_iter to avoid KEYS blocking; collects keys in chunks and
        UNLINKs each chunk to minimize round-trips and keep deletion async on
        server. Glob resolution is done by Redis; a literal key is its own
        pattern.

        Args:
            pattern: Redis SCAN match pattern (e.g. tickets:status:*).

        Returns:
            Number of keys deleted.
        """

        async def _scan_unlink(r: redis.Redis) -> int:
            deleted = 0
            chunk: list[str] = []
            async for key in r.scan_iter(match=pattern, count=CACHE_DELETE_CHUNK_SIZE):
                chunk.append(key)
                if len(chunk) >= CACHE_DELETE_CHUNK_SIZE:
                    deleted += await _unlink(r, chunk)
                    chunk = []
            if chunk:
                deleted += await _unlink(r, chunk)
            return deleted

        deleted = await self._execute("delete_pattern", pattern, _scan_unlink, 0)
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    async def incr(
        self, key: str, amount: int = 1, ttl: int | None = None
    ) -> int | None:
        """Atomically increment a counter key. Returns new value or None if unavailable.

        Args:
            key: Counter key.
            amount: Increment step.
            ttl: Optional expiry applied when the counter is created.
        """

        async def _incrby(r: redis.Redis) -> int:
            value = int(await r.incrby(key, amount))
            if ttl is not None and value == amount:
                await r.expire(key, ttl)
            return value

        return await self._execute("incr", key, _incrby, None)

    async def get_counter(self, key: str) -> int:
        """Return an integer counter value (0 when missing or unavailable)."""
        raw = await self._execute("get", key, lambda r: r.get(key), None)
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            logger.warning("Counter %s holds a non-integer value", key)
            return 0

    async def ttl(self, key: str) -> int | None:
        """Return remaining TTL in seconds, or None if key is missing/has no expiry."""
        remaining = await self._execute("ttl", key, lambda r: r.ttl(key), -2)
        return remaining if remaining is not None and remaining >= 0 else None


async def _unlink(r: redis.Redis, keys: list[str]) -> int:
    """UNLINK one chunk of keys in a non-transactional pipeline."""
    async with r.pipeline(transaction=False) as pipe:
        pipe.unlink(*keys)
        results = await pipe.execute()
    return sum(int(res or 0) for res in results)
