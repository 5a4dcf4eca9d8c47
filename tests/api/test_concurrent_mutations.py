"""Overlapping mutations on one ticket leave no stale cache entries behind."""

import asyncio

import pytest
from httpx import AsyncClient


@pytest.fixture
def app_env(tmp_path) -> dict[str, str]:
    # Concurrent requests get their own connections; a file database lets them commit independently.
    return {"DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path}/concurrent.db"}


async def test_concurrent_status_and_assignee_changes(client: AsyncClient, cache) -> None:
    created = await client.post(
        "/api/v1/tickets", json={"title": "VPN drops", "priority": "high", "assignee": "ana"}
    )
    assert created.status_code == 201
    ticket_id = created.json()["id"]

    seeded = [
        f"/api/v1/tickets/{ticket_id}",
        "/api/v1/tickets",
        "/api/v1/tickets/status/open",
        "/api/v1/tickets/status/resolved",
        "/api/v1/tickets/assignee/ana",
        "/api/v1/tickets/assignee/bo",
        "/api/v1/tickets/priority/high",
    ]
    for url in seeded:
        assert (await client.get(url)).status_code == 200
    assert {
        f"tickets:{ticket_id}",
        "tickets:status:open",
        "tickets:assignee:ana",
        "tickets:priority:high",
    } <= set(cache.keys())

    status_change, reassign = await asyncio.gather(
        client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "resolved"}),
        client.put(f"/api/v1/tickets/{ticket_id}", json={"assignee": "bo"}),
    )
    assert status_change.status_code == 200, status_change.text
    assert reassign.status_code == 200, reassign.text

    leftover = [
        k for k in cache.keys()
        if k.startswith("tickets:") or k.startswith("cache:/api/v1/tickets")
    ]
    assert leftover == []

    final = (await client.get(f"/api/v1/tickets/{ticket_id}")).json()
    assert final["status"] == "resolved"
    assert final["assignee"] == "bo"
    resolved = (await client.get("/api/v1/tickets/status/resolved")).json()
    assert [t["assignee"] for t in resolved] == ["bo"]
    assert (await client.get("/api/v1/tickets/assignee/ana")).json() == []
