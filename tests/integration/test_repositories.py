"""Repository integration tests on in-memory SQLite, with and without the store."""

from unittest.mock import AsyncMock

from cached_api.infrastructure.persistence.repositories import (
    BlogRepository,
    PaymentRepository,
    TicketRepository,
)


async def test_ticket_repo_without_cache(db_session) -> None:
    """Create a ticket then read it back with no store configured."""
    repo = TicketRepository(db_session, cache=None)
    created = await repo.create_ticket(title="No cache", priority="low")

    found = await repo.get_by_id(created["id"])
    assert found == created
    assert await repo.list_by_index("priority", "low") == [created]


async def test_read_through_populates_domain_key(db_session, cache) -> None:
    repo = TicketRepository(db_session, cache=cache, cache_ttl=120)
    created = await repo.create_ticket(title="Cached", assignee="ana")

    await repo.get_by_id(created["id"])

    assert await cache.get(f"tickets:{created['id']}") == created
    assert cache.ttl(f"tickets:{created['id']}") == 120


async def test_cached_read_skips_database(db_session, cache) -> None:
    repo = TicketRepository(db_session, cache=cache)
    created = await repo.create_ticket(title="Cached")
    await repo.list_all()

    repo.db = AsyncMock()
    assert await repo.list_all() == [created]
    repo.db.execute.assert_not_awaited()


async def test_invalidation_runs_after_commit(db_session, cache) -> None:
    """The store sees the delete only once the write is committed."""
    repo = TicketRepository(db_session, cache=cache)
    created = await repo.create_ticket(title="Ordering")
    events: list[str] = []

    original_commit = db_session.commit
    original_delete = cache.delete_pattern

    async def _commit() -> None:
        events.append("commit")
        await original_commit()

    async def _delete(pattern: str) -> int:
        events.append("invalidate")
        return await original_delete(pattern)

    db_session.commit = _commit
    cache.delete_pattern = _delete

    await repo.change_status(created["id"], "resolved")

    assert events[0] == "commit"
    assert set(events[1:]) == {"invalidate"}


async def test_payment_repo_uses_short_ttl(db_session, cache) -> None:
    repo = PaymentRepository(db_session, cache=cache)
    payment = await repo.create_payment(customer="acme", amount=100)
    await repo.get_by_id(payment["id"])
    assert cache.ttl(f"payments:{payment['id']}") == 60


async def test_view_counter_without_store(db_session) -> None:
    repo = BlogRepository(db_session, cache=None)
    blog = await repo.create_blog(title="t", content="c", author="kim")
    assert await repo.record_view(blog["id"]) == 0
    assert await repo.get_views(blog["id"]) == 0
