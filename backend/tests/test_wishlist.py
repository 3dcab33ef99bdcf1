"""
Tests for wishlist endpoints and the wishlist service.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select, update

from conftest import create_event
from eventfinder.models.user import User
from eventfinder.models.wishlist import WishlistEntry
from eventfinder.services import wishlist_service


@pytest.mark.asyncio
async def test_add_to_wishlist_is_idempotent(client: AsyncClient, user_headers, test_event):
    event_id = test_event.id

    first = await client.post("/api/wishlist", json={"eventId": event_id}, headers=user_headers)
    assert first.status_code == 201
    entry = first.json()["data"]
    assert entry["eventId"] == event_id

    second = await client.post("/api/wishlist", json={"eventId": event_id}, headers=user_headers)
    assert second.status_code == 200
    assert second.json()["data"]["id"] == entry["id"]

    listing = await client.get("/api/wishlist", headers=user_headers)
    assert len(listing.json()["data"]) == 1


@pytest.mark.asyncio
async def test_add_missing_event(client: AsyncClient, user_headers):
    response = await client.post("/api/wishlist", json={"eventId": 99999}, headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_wishlist_requires_auth(client: AsyncClient):
    assert (await client.get("/api/wishlist")).status_code == 401


@pytest.mark.asyncio
async def test_wishlist_lists_newest_first_with_events(
    client: AsyncClient, db_session, organizer, user_headers
):
    older = await create_event(db_session, organizer, title="Older")
    newer = await create_event(db_session, organizer, title="Newer")
    older_id, newer_id = older.id, newer.id

    await client.post("/api/wishlist", json={"eventId": older_id}, headers=user_headers)
    await client.post("/api/wishlist", json={"eventId": newer_id}, headers=user_headers)

    response = await client.get("/api/wishlist", headers=user_headers)
    data = response.json()["data"]
    assert [e["eventId"] for e in data] == [newer_id, older_id]
    assert data[0]["event"]["title"] == "Newer"


@pytest.mark.asyncio
async def test_wishlist_skips_deleted_events(client: AsyncClient, user_headers, organizer_headers, test_event):
    event_id = test_event.id
    await client.post("/api/wishlist", json={"eventId": event_id}, headers=user_headers)

    deleted = await client.delete(f"/api/events/{event_id}", headers=organizer_headers)
    assert deleted.status_code == 200

    response = await client.get("/api/wishlist", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["data"] == []


@pytest.mark.asyncio
async def test_remove_by_entry_id(client: AsyncClient, user_headers, test_event):
    added = await client.post("/api/wishlist", json={"eventId": test_event.id}, headers=user_headers)
    entry_id = added.json()["data"]["id"]

    response = await client.delete(f"/api/wishlist/{entry_id}", headers=user_headers)
    assert response.status_code == 200
    assert (await client.get("/api/wishlist", headers=user_headers)).json()["data"] == []


@pytest.mark.asyncio
async def test_remove_by_event_id(client: AsyncClient, db_session, organizer, user_headers):
    # Push the event id past the entry id so the two cannot coincide
    for i in range(3):
        await create_event(db_session, organizer, title=f"Filler {i}")
    event = await create_event(db_session, organizer, title="Target")
    event_id = event.id

    await client.post("/api/wishlist", json={"eventId": event_id}, headers=user_headers)
    response = await client.delete(f"/api/wishlist/{event_id}", headers=user_headers)
    assert response.status_code == 200
    assert (await client.get("/api/wishlist", headers=user_headers)).json()["data"] == []


@pytest.mark.asyncio
async def test_remove_other_users_entry(client: AsyncClient, user_headers, other_headers, test_event):
    added = await client.post("/api/wishlist", json={"eventId": test_event.id}, headers=other_headers)
    entry_id = added.json()["data"]["id"]

    response = await client.delete(f"/api/wishlist/{entry_id}", headers=user_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_remove_unknown_entry(client: AsyncClient, user_headers):
    response = await client.delete("/api/wishlist/99999", headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_add_returns_existing_entry(db_session, test_user, test_event, monkeypatch):
    """Losing the unique-constraint race returns the winner's entry and keeps earlier writes."""
    user_id, event_id = test_user.id, test_event.id
    winner = WishlistEntry(user_id=user_id, event_id=event_id)
    db_session.add(winner)
    await db_session.commit()
    winner_id = winner.id

    find_entry = wishlist_service._find_entry
    calls = []

    async def miss_first_lookup(db, uid, eid):
        calls.append(eid)
        if len(calls) == 1:
            return None
        return await find_entry(db, uid, eid)

    monkeypatch.setattr(wishlist_service, "_find_entry", miss_first_lookup)

    await db_session.execute(update(User).where(User.id == user_id).values(bio="Loves concerts"))
    entry, created = await wishlist_service.add_to_wishlist(db_session, user_id, event_id)
    await db_session.commit()

    assert created is False
    assert entry.id == winner_id
    bio = (await db_session.execute(select(User.bio).where(User.id == user_id))).scalar()
    assert bio == "Loves concerts"
