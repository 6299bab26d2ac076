"""
Tests for the available-dates cache, backed by an in-process fake Redis.
"""

import pytest
import pytest_asyncio
from fakeredis import aioredis
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.routes import bookings as booking_routes
from app.services import cache_service
from helpers import book, reschedule

WINDOW = {"startDate": "2025-06-01", "endDate": "2025-06-10"}


@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    client = aioredis.FakeRedis(decode_responses=True)

    async def get_fake_redis():
        return client

    monkeypatch.setattr(cache_service, "get_redis", get_fake_redis)
    yield client
    await client.flushall()


async def available_days(client: AsyncClient, venue_id: int) -> tuple[list[str], bool]:
    response = await client.get(f"/api/v1/venues/{venue_id}/available-dates", params=WINDOW)
    assert response.status_code == 200
    data = response.json()
    return [d["dateString"] for d in data["dates"]], data["cached"]


@pytest.mark.asyncio
async def test_cache_hit_after_set(fake_redis):
    payload = {"venue_id": 1, "dates": []}
    await cache_service.set_cached_available_dates(1, 1, "2025-06-01", "2025-06-10", payload)

    assert await cache_service.get_cached_available_dates(1, 1, "2025-06-01", "2025-06-10") == payload
    # Another calendar version is another entry
    assert await cache_service.get_cached_available_dates(1, 2, "2025-06-01", "2025-06-10") is None


@pytest.mark.asyncio
async def test_invalidate_removes_only_that_venue(fake_redis):
    await cache_service.set_cached_available_dates(1, 1, "2025-06-01", "2025-06-10", {"venue_id": 1})
    await cache_service.set_cached_available_dates(1, 3, "2025-07-01", "2025-07-10", {"venue_id": 1})
    await cache_service.set_cached_available_dates(10, 1, "2025-06-01", "2025-06-10", {"venue_id": 10})

    await cache_service.invalidate_venue_cache(1)

    assert await cache_service.get_cached_available_dates(1, 1, "2025-06-01", "2025-06-10") is None
    assert await cache_service.get_cached_available_dates(1, 3, "2025-07-01", "2025-07-10") is None
    assert await cache_service.get_cached_available_dates(10, 1, "2025-06-01", "2025-06-10") == {"venue_id": 10}


@pytest.mark.asyncio
async def test_available_dates_served_from_cache(client: AsyncClient, fake_redis, test_venue):
    first, first_cached = await available_days(client, test_venue.id)
    second, second_cached = await available_days(client, test_venue.id)

    assert first_cached is False
    assert second_cached is True
    assert second == first


@pytest.mark.asyncio
async def test_booking_refreshes_cached_days(client: AsyncClient, fake_redis, test_venue):
    venue_id = test_venue.id
    before, _ = await available_days(client, venue_id)
    assert "2025-06-05" in before

    assert (await book(client, venue_id, "2025-06-05", "2025-06-05")).status_code == 201

    after, cached = await available_days(client, venue_id)
    assert cached is False
    assert "2025-06-05" not in after


@pytest.mark.asyncio
async def test_late_write_from_older_calendar_is_never_served(
    client: AsyncClient, fake_redis, test_venue
):
    """A reader that saw the calendar before a booking committed caches under the old version."""
    venue_id = test_venue.id
    response = await client.get(f"/api/v1/venues/{venue_id}/available-dates", params=WINDOW)
    stale = response.json()

    await book(client, venue_id, "2025-06-05", "2025-06-05")
    # The slow reader finishes after the booking cleared the cache
    await cache_service.set_cached_available_dates(
        venue_id, 1, WINDOW["startDate"], WINDOW["endDate"], stale
    )

    after, _ = await available_days(client, venue_id)
    assert "2025-06-05" not in after


@pytest.mark.asyncio
async def test_cache_cleared_only_after_commit(
    client: AsyncClient, db_session: AsyncSession, test_venue, monkeypatch
):
    open_transaction = []

    async def record_invalidation(venue_id):
        open_transaction.append(db_session.in_transaction())

    monkeypatch.setattr(booking_routes, "invalidate_venue_cache", record_invalidation)

    booking_id = (await book(client, test_venue.id, "2025-06-03", "2025-06-03")).json()["id"]
    await reschedule(client, booking_id, "2025-06-24", "2025-06-24")
    await client.put(f"/api/v1/bookings/{booking_id}/cancel")

    assert open_transaction == [False, False, False]
