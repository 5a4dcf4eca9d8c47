"""Read-through response cache middleware on a minimal app."""

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response, StreamingResponse
from httpx import ASGITransport, AsyncClient

from cached_api.middleware import ResponseCacheMiddleware, resolve_ttl


@pytest.fixture
def calls() -> dict[str, int]:
    return {"items": 0, "orders": 0, "create": 0}


@pytest.fixture
def mini_app(cache, calls) -> FastAPI:
    app = FastAPI()

    @app.get("/api/items")
    async def items(page: int = 1):
        calls["items"] += 1
        return {"page": page, "n": calls["items"]}

    @app.get("/api/orders")
    async def orders():
        calls["orders"] += 1
        return {"n": calls["orders"]}

    @app.post("/api/items", status_code=201)
    async def create():
        calls["create"] += 1
        return {"created": calls["create"]}

    @app.get("/api/missing")
    async def missing():
        return JSONResponse({"error": "nope"}, status_code=404)

    @app.get("/api/binary")
    async def binary():
        return Response(content=b"\xff\xfe\x00", media_type="application/octet-stream")

    @app.get("/api/health")
    async def health():
        return {"ok": True}

    @app.get("/other")
    async def other():
        return {"ok": True}

    @app.get("/apiary")
    async def apiary():
        return {"ok": True}

    @app.get("/api/large")
    async def large():
        return {"data": "x" * 2048}

    @app.get("/api/stream")
    async def stream():
        async def chunks():
            for _ in range(4):
                yield b"y" * 400

        return StreamingResponse(chunks(), media_type="text/plain")

    app.add_middleware(
        ResponseCacheMiddleware,
        default_ttl=300,
        route_ttls={"/api/orders": 60},
        path_prefixes=("/api",),
        exclude_paths=("/api/health*",),
        max_body_size=1024,
    )
    app.state.cache = cache
    return app


@pytest.fixture
async def mini_client(mini_app):
    async with AsyncClient(transport=ASGITransport(app=mini_app), base_url="http://test") as ac:
        yield ac


async def test_second_get_is_served_from_cache(mini_client, cache, calls) -> None:
    first = await mini_client.get("/api/items")
    second = await mini_client.get("/api/items")

    assert first.headers["x-cache"] == "MISS"
    assert second.headers["x-cache"] == "HIT"
    assert second.content == first.content
    assert second.headers["content-type"].startswith("application/json")
    assert calls["items"] == 1
    assert "cache:/api/items" in cache.keys()


async def test_query_string_is_part_of_key(mini_client, cache, calls) -> None:
    await mini_client.get("/api/items?page=1")
    await mini_client.get("/api/items?page=2")
    assert calls["items"] == 2
    assert {"cache:/api/items?page=1", "cache:/api/items?page=2"} <= set(cache.keys())


async def test_non_get_passes_through_without_store_access(mini_client, cache, calls) -> None:
    await mini_client.post("/api/items")
    await mini_client.post("/api/items")
    assert calls["create"] == 2
    assert cache.calls == []


async def test_force_cache_opts_non_get_in(mini_client, calls) -> None:
    first = await mini_client.post("/api/items?forceCache=true")
    second = await mini_client.post("/api/items?forceCache=true")
    assert first.status_code == 201
    assert second.status_code == 200
    assert second.headers["x-cache"] == "HIT"
    assert calls["create"] == 1


async def test_error_responses_are_not_cached(mini_client, cache) -> None:
    await mini_client.get("/api/missing")
    response = await mini_client.get("/api/missing")
    assert response.status_code == 404
    assert response.headers["x-cache"] == "MISS"
    assert "cache:/api/missing" not in cache.keys()


async def test_non_utf8_body_is_not_cached(mini_client, cache) -> None:
    response = await mini_client.get("/api/binary")
    assert response.content == b"\xff\xfe\x00"
    assert "cache:/api/binary" not in cache.keys()


async def test_excluded_and_foreign_paths_bypass_cache(mini_client, cache) -> None:
    await mini_client.get("/api/health")
    await mini_client.get("/other")
    await mini_client.get("/apiary")
    assert cache.calls == []


async def test_route_ttl_override(mini_client, cache) -> None:
    await mini_client.get("/api/orders")
    await mini_client.get("/api/items")
    assert cache.ttl("cache:/api/orders") == 60
    assert cache.ttl("cache:/api/items") == 300


async def test_entry_expires_after_ttl(mini_client, cache, calls) -> None:
    await mini_client.get("/api/orders")
    cache.advance(61)
    response = await mini_client.get("/api/orders")
    assert response.headers["x-cache"] == "MISS"
    assert calls["orders"] == 2


async def test_unavailable_store_passes_through(mini_client, cache, calls) -> None:
    cache.available = False
    await mini_client.get("/api/items")
    await mini_client.get("/api/items")
    assert calls["items"] == 2
    assert cache.calls == []


async def test_store_failure_is_treated_as_miss(mini_client, cache, calls, monkeypatch) -> None:
    async def _broken(*args, **kwargs):
        raise ConnectionError("store down")

    monkeypatch.setattr(cache, "get", _broken)
    monkeypatch.setattr(cache, "set", _broken)

    response = await mini_client.get("/api/items")
    assert response.status_code == 200
    assert response.json()["n"] == 1
    await mini_client.get("/api/items")
    assert calls["items"] == 2


async def test_malformed_entry_is_ignored(mini_client, cache, calls) -> None:
    await cache.set("cache:/api/items", "not an envelope")
    response = await mini_client.get("/api/items")
    assert response.headers["x-cache"] == "MISS"
    assert calls["items"] == 1


def test_resolve_ttl_longest_prefix_wins() -> None:
    ttls = {"/api": 120, "/api/v1/payments": 60}
    assert resolve_ttl("/api/v1/payments/p1", 300, ttls) == 60
    assert resolve_ttl("/api/v1/tickets", 300, ttls) == 120
    assert resolve_ttl("/health", 300, ttls) == 300


def test_resolve_ttl_matches_whole_segments() -> None:
    ttls = {"/api/v1/payments": 60}
    assert resolve_ttl("/api/v1/payments", 300, ttls) == 60
    assert resolve_ttl("/api/v1/paymentsX", 300, ttls) == 300
    assert resolve_ttl("/api/v1/payments-archive/p1", 300, ttls) == 300


async def test_oversized_body_is_served_but_not_cached(mini_client, cache) -> None:
    first = await mini_client.get("/api/large")
    second = await mini_client.get("/api/large")
    assert first.status_code == 200
    assert len(first.json()["data"]) == 2048
    assert second.headers["x-cache"] == "MISS"
    assert "cache:/api/large" not in cache.keys()


async def test_streamed_body_over_limit_is_not_cached(mini_client, cache) -> None:
    response = await mini_client.get("/api/stream")
    assert response.content == b"y" * 1600
    assert "cache:/api/stream" not in cache.keys()
    assert ("set", "cache:/api/stream") not in cache.calls
