"""Pytest configuration and fixtures for cached_api.

HTTP tests run the app created by cached_api.main.create_app() against an
in-memory SQLite database and an in-memory key-value store (InMemoryCache)
with a controllable clock, so TTL expiry is tested without sleeping.
"""

import json
import re
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from cached_api.core.config import get_settings
from cached_api.infrastructure.persistence.database import (
    dispose_engine,
    get_db,
    init_models,
)
from cached_api.main import create_app


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a store glob (*, ?, [..], backslash escapes) to a regex."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[" and "]" in pattern[i + 1 :]:
            end = pattern.index("]", i + 1)
            out.append("[" + pattern[i + 1 : end].replace("\\", "\\\\") + "]")
            i = end + 1
            continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)


class InMemoryCache:
    """CacheProtocol implementation backed by a dict.

    Values are stored as JSON text like the Redis adapter. Expiry uses the
    fake clock (advance()). Patterns in fail_patterns raise on delete to
    simulate a store failure mid-invalidation.
    """

    def __init__(self) -> None:
        self.store: dict[str, tuple[str, float | None]] = {}
        self.now = 0.0
        self.available = True
        self.calls: list[tuple[str, str]] = []
        self.fail_patterns: set[str] = set()

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _live(self, key: str) -> str | None:
        entry = self.store.get(key)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at is not None and expires_at <= self.now:
            del self.store[key]
            return None
        return raw

    def keys(self) -> list[str]:
        return [k for k in list(self.store) if self._live(k) is not None]

    def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> Any:
        self.calls.append(("get", key))
        raw = self._live(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        self.calls.append(("set", key))
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError):
            return False
        self.store[key] = (raw, self.now + ttl)
        return True

    async def delete(self, key: str) -> int:
        self.calls.append(("delete", key))
        if self._live(key) is None:
            return 0
        del self.store[key]
        return 1

    async def delete_pattern(self, pattern: str) -> int:
        self.calls.append(("delete_pattern", pattern))
        if pattern in self.fail_patterns:
            raise ConnectionError(f"store unreachable while deleting {pattern}")
        regex = _glob_to_regex(pattern)
        matched = [k for k in self.keys() if regex.match(k)]
        for key in matched:
            del self.store[key]
        return len(matched)

    async def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int | None:
        self.calls.append(("incr", key))
        value = int(self._live(key) or 0) + amount
        expires_at = self.store[key][1] if key in self.store else None
        if expires_at is None and ttl is not None and value == amount:
            expires_at = self.now + ttl
        self.store[key] = (str(value), expires_at)
        return value

    async def get_counter(self, key: str) -> int:
        raw = self._live(key)
        return int(raw) if raw is not None else 0

    def ttl(self, key: str) -> float | None:
        if self._live(key) is None:
            return None
        expires_at = self.store[key][1]
        return None if expires_at is None else expires_at - self.now


@pytest.fixture
def cache() -> InMemoryCache:
    """Fresh in-memory store per test."""
    return InMemoryCache()


@pytest.fixture
def app_env() -> dict[str, str]:
    """Extra environment for the app under test. Override in a module to change settings."""
    return {}


@pytest.fixture
async def app(monkeypatch, cache: InMemoryCache, app_env: dict[str, str]):
    """Application on a fresh in-memory database with the in-memory store attached."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("REDIS_ENABLED", "false")
    for name, value in app_env.items():
        monkeypatch.setenv(name, value)
    get_settings.cache_clear()
    await dispose_engine()

    application = create_app()
    await init_models()
    # ASGITransport does not run the lifespan; attach the store directly.
    application.state.cache = cache
    yield application

    await dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session(app):
    """Database session for repository tests, on the same engine as the app."""
    sessions = get_db()
    session = await anext(sessions)
    yield session
    await sessions.aclose()
