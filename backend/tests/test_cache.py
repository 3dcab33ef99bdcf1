"""
Listing cache tests with an in-memory stand-in for the Redis client.
"""

import fnmatch

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY
from sqlalchemy import select, update

from eventfinder.models.event import Event, EventStatus
from eventfinder.services import cache_service


class InMemoryRedis:
    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)

    async def scan_iter(self, match="*", count=None):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key


@pytest.fixture
def fake_redis(monkeypatch):
    fake = InMemoryRedis()

    async def get_redis():
        return fake

    monkeypatch.setattr(cache_service, "get_redis", get_redis)
    return fake


@pytest.mark.asyncio
async def test_listing_is_served_from_cache(client: AsyncClient, db_session, test_event, fake_redis):
    event_id = test_event.id

    first = await client.get("/api/events")
    assert first.json()["data"][0]["title"] == "Test Concert"
    assert len(fake_redis.store) == 1

    # A write behind the API's back is invisible until the cache is invalidated
    await db_session.execute(update(Event).where(Event.id == event_id).values(title="Changed"))
    await db_session.commit()

    cached = await client.get("/api/events")
    assert cached.json()["data"][0]["title"] == "Test Concert"
    assert cached.json()["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_booking_invalidates_listing(client: AsyncClient, test_event, user_headers, fake_redis):
    event_id = test_event.id
    await client.get("/api/events")
    await client.get("/api/events", params={"sortBy": "rating"})
    assert len(fake_redis.store) == 2

    booked = await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 2}, headers=user_headers)
    assert booked.status_code == 201
    assert fake_redis.store == {}

    listing = await client.get("/api/events")
    assert listing.json()["data"][0]["availableSeats"] == 98


@pytest.mark.asyncio
async def test_moderation_invalidates_listing(client: AsyncClient, pending_event, admin_headers, fake_redis):
    event_id = pending_event.id
    assert (await client.get("/api/events")).json()["data"] == []

    await client.patch(f"/api/events/{event_id}/approve", headers=admin_headers)

    listing = await client.get("/api/events")
    assert [e["id"] for e in listing.json()["data"]] == [event_id]


@pytest.mark.asyncio
async def test_invalidation_sees_committed_state(
    client: AsyncClient, session_factory, pending_event, admin_headers, fake_redis, monkeypatch
):
    """A listing refilled at invalidation time must already see the approval."""
    event_id = pending_event.id
    seen = []

    async def read_status_then_invalidate():
        async with session_factory() as session:
            seen.append((await session.execute(select(Event.status).where(Event.id == event_id))).scalar())

    monkeypatch.setattr(cache_service, "invalidate_event_cache", read_status_then_invalidate)

    response = await client.patch(f"/api/events/{event_id}/approve", headers=admin_headers)
    assert response.status_code == 200
    assert seen == [EventStatus.APPROVED.value]


def _cache_ops(operation: str, result: str) -> float:
    return REGISTRY.get_sample_value("cache_operations_total", {"operation": operation, "result": result}) or 0.0


@pytest.mark.asyncio
async def test_cache_writes_are_counted_as_stored(client: AsyncClient, test_event, fake_redis):
    before_miss = _cache_ops("get", "miss")
    before_stored = _cache_ops("set", "stored")
    before_set_miss = _cache_ops("set", "miss")

    await client.get("/api/events")

    assert _cache_ops("get", "miss") == before_miss + 1
    assert _cache_ops("set", "stored") == before_stored + 1
    assert _cache_ops("set", "miss") == before_set_miss


def test_cache_key_covers_every_query_parameter():
    key = cache_service._make_event_list_key(2, 20, "Music", "price_asc")
    assert key == "events:list:page=2&limit=20&category=Music&sort=price_asc"
    assert key != cache_service._make_event_list_key(2, 20, None, "price_asc")
