"""Cache protocol consumed by the middleware, invalidation and repositories (DIP)."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Protocol for key-value cache backends (e.g. Redis).

    Implementations must never raise into request handling: store failures
    degrade to a miss (get), a no-op (set) or zero removed (delete).
    Expiry is the store's responsibility.
    """

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds. Returns True if stored."""
        ...

    async def delete(self, key: str) -> int:
        """Remove key from cache. Returns number of keys removed."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern. Returns number removed."""
        ...

    async def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int | None:
        """Atomically increment a counter. Returns new value or None."""
        ...

    async def get_counter(self, key: str) -> int:
        """Return a counter value, 0 when missing or unavailable."""
        ...
