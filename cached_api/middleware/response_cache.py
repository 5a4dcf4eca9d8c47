"""Read-through response cache middleware.

Serves eligible requests from the cache under a transparent key
(cache:<path>?<query>); on a miss the request runs normally and a
successful (2xx) response body is stored with the route's TTL. Bodies
above max_body_size stop being buffered and are not stored.
Uses raw ASGI (no BaseHTTPMiddleware) for production-safe streaming.

A hit never reaches the handler, so side effects of the read path (e.g.
counters bumped inside a GET handler) do not run on hits. Counters that
must be exact live outside the cached path (see blog views).

Any store error is logged and treated as a miss (read) or a no-op
(write): with the store down the API behaves as if no cache existed.
"""

import logging
from collections.abc import Mapping, Sequence
from fnmatch import fnmatchcase
from typing import Any, Callable
from urllib.parse import parse_qs

from cached_api.core.constants import (
    CACHE_STATUS_HEADER,
    DEFAULT_CACHE_MAX_BODY_BYTES,
    DEFAULT_CACHE_TTL,
)
from cached_api.infrastructure.cache.cache_protocol import CacheProtocol
from cached_api.infrastructure.cache.keys import http_key

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "1", "yes"}


def _get_header(headers: Sequence[tuple[bytes, bytes]], name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in headers:
        if k.lower() == want:
            return v.decode("latin-1")
    return None


def _forced(query_string: str, force_param: str) -> bool:
    values = parse_qs(query_string).get(force_param, [])
    return any(v.strip().lower() in _TRUTHY for v in values)


def _under(path: str, prefix: str) -> bool:
    """True if path is prefix itself or lies below it (whole path segments only)."""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def resolve_ttl(path: str, default_ttl: int, route_ttls: Mapping[str, int]) -> int:
    """TTL for path: longest matching route_ttls prefix, else default_ttl."""
    best: tuple[int, int] | None = None
    for prefix, ttl in route_ttls.items():
        if _under(path, prefix) and (best is None or len(prefix) > best[0]):
            best = (len(prefix), ttl)
    return best[1] if best else default_ttl


def _envelope_is_valid(cached: Any) -> bool:
    return isinstance(cached, dict) and isinstance(cached.get("body"), str)


def ResponseCacheMiddleware(
    app: Callable,
    *,
    default_ttl: int = DEFAULT_CACHE_TTL,
    route_ttls: Mapping[str, int] | None = None,
    force_param: str = "forceCache",
    path_prefixes: Sequence[str] = ("/",),
    exclude_paths: Sequence[str] = (),
    max_body_size: int = DEFAULT_CACHE_MAX_BODY_BYTES,
) -> Callable:
    """Read-through cache ahead of the router. Raw ASGI.

    Eligible requests: path under one of path_prefixes, not matching any
    exclude_paths glob, and method GET (or any method with
    <force_param>=true in the query string). Other requests pass through
    with no store access. The cache is read from app.state.cache per
    request; when it is missing or unavailable everything passes through.

    Args:
        app: Downstream ASGI app.
        default_ttl: TTL in seconds when no route override matches.
        route_ttls: Path prefix -> TTL override (e.g. 60s for payments).
        force_param: Query parameter that opts non-GET requests in.
        path_prefixes: Paths the cache is installed ahead of.
        exclude_paths: fnmatch globs never cached.
        max_body_size: Bodies larger than this many bytes are passed through
            without being buffered or stored.
    """
    ttls = dict(route_ttls or {})

    def _is_eligible(scope: dict, query_string: str) -> bool:
        path = scope.get("path", "")
        if not any(_under(path, p) for p in path_prefixes):
            return False
        if any(fnmatchcase(path, pattern) for pattern in exclude_paths):
            return False
        return scope.get("method") == "GET" or _forced(query_string, force_param)

    def _get_cache(scope: dict) -> CacheProtocol | None:
        starlette_app = scope.get("app")
        cache = getattr(getattr(starlette_app, "state", None), "cache", None)
        if cache is None or not cache.is_available():
            return None
        return cache

    async def _read(cache: CacheProtocol, key: str) -> dict | None:
        try:
            cached = await cache.get(key)
        except Exception:
            logger.exception("Cache read failed for %s; treating as miss", key)
            return None
        if cached is None:
            return None
        if not _envelope_is_valid(cached):
            logger.warning("Ignoring malformed cache entry for %s", key)
            return None
        return cached

    async def _write(cache: CacheProtocol, key: str, entry: dict, ttl: int) -> None:
        try:
            stored = await cache.set(key, entry, ttl=ttl)
        except Exception:
            logger.exception("Cache write failed for %s; response not cached", key)
            return
        if not stored:
            logger.debug("Cache write skipped for %s", key)

    async def _send_hit(send: Callable, entry: dict) -> None:
        body = entry["body"].encode("utf-8")
        media_type = entry.get("media_type") or "application/json"
        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", media_type.encode("latin-1")),
                (b"content-length", str(len(body)).encode()),
                (CACHE_STATUS_HEADER.lower().encode(), b"HIT"),
            ],
        })
        await send({"type": "http.response.body", "body": body, "more_body": False})

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        query_string = scope.get("query_string", b"").decode("latin-1")
        if not _is_eligible(scope, query_string):
            await app(scope, receive, send)
            return
        cache = _get_cache(scope)
        if cache is None:
            await app(scope, receive, send)
            return

        path = scope.get("path", "")
        key = http_key(path, query_string)
        cached = await _read(cache, key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            await _send_hit(send, cached)
            return
        logger.debug("Cache miss for %s", key)

        response: dict[str, Any] = {"status": None, "media_type": None, "size": 0, "oversized": False}
        chunks: list[bytes] = []

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                response["status"] = message["status"]
                headers = list(message.get("headers", []))
                response["media_type"] = _get_header(headers, "content-type")
                headers.append((CACHE_STATUS_HEADER.lower().encode(), b"MISS"))
                message["headers"] = headers
                await send(message)
                return
            if message["type"] != "http.response.body":
                await send(message)
                return
            status = response["status"]
            cacheable = (
                status is not None and 200 <= status < 300 and not response["oversized"]
            )
            if cacheable:
                body = message.get("body", b"")
                response["size"] += len(body)
                if response["size"] > max_body_size:
                    logger.debug("Response for %s exceeds %s bytes; not cached", key, max_body_size)
                    response["oversized"] = True
                    chunks.clear()
                    cacheable = False
                else:
                    chunks.append(body)
            await send(message)
            if cacheable and not message.get("more_body", False):
                await _store(b"".join(chunks))

        async def _store(body: bytes) -> None:
            try:
                text = body.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Response for %s is not UTF-8; not cached", key)
                return
            entry = {
                "status": response["status"],
                "media_type": response["media_type"],
                "body": text,
            }
            await _write(cache, key, entry, resolve_ttl(path, default_ttl, ttls))

        await app(scope, receive, send_wrapper)

    return asgi_app
