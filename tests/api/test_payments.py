"""Payments API: short route TTL, customer buckets and refunds."""

from httpx import AsyncClient


async def _pay(client: AsyncClient, customer: str = "acme@example.com", amount: int = 1500) -> dict:
    response = await client.post(
        "/api/v1/payments", json={"customer": customer, "amount": amount, "currency": "USD"}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_payment(client: AsyncClient) -> None:
    payment = await _pay(client)
    assert payment["status"] == "succeeded"
    assert payment["currency"] == "usd"
    assert payment["refunded_at"] is None


async def test_payment_responses_use_short_ttl(client: AsyncClient, cache) -> None:
    await _pay(client)
    await client.get("/api/v1/payments")
    assert cache.ttl("cache:/api/v1/payments") == 60

    cache.advance(61)
    response = await client.get("/api/v1/payments")
    assert response.headers["x-cache"] == "MISS"


async def test_refund_invalidates_customer_bucket(client: AsyncClient) -> None:
    payment = await _pay(client)
    url = "/api/v1/payments/customer/acme@example.com"
    assert (await client.get(url)).json()[0]["status"] == "succeeded"

    refunded = await client.post(f"/api/v1/payments/{payment['id']}/refund")
    assert refunded.status_code == 200
    assert refunded.json()["refunded_at"] is not None

    assert (await client.get(url)).json()[0]["status"] == "refunded"


async def test_double_refund_conflicts(client: AsyncClient) -> None:
    payment = await _pay(client)
    await client.post(f"/api/v1/payments/{payment['id']}/refund")
    response = await client.post(f"/api/v1/payments/{payment['id']}/refund")
    assert response.status_code == 409


async def test_list_filtered_by_status(client: AsyncClient) -> None:
    first = await _pay(client)
    await _pay(client, customer="globex@example.com")
    await client.post(f"/api/v1/payments/{first['id']}/refund")

    response = await client.get("/api/v1/payments", params={"status": "refunded"})
    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["payments"][0]["id"] == first["id"]
