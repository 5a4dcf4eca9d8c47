"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"
    assert "x-cache" not in response.headers


async def test_readiness_reports_cache_state(client: AsyncClient, cache) -> None:
    """Readiness stays 200 when the store is down; it only reports the state."""
    response = await client.get("/api/v1/health/ready")
    assert response.json() == {"status": "ok", "cache": "available"}

    cache.available = False
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["cache"] == "unavailable"


async def test_readiness_without_cache(app, client: AsyncClient) -> None:
    app.state.cache = None
    response = await client.get("/api/v1/health/ready")
    assert response.json()["cache"] == "disabled"


async def test_unknown_route_is_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"
