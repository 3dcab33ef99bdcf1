"""
Tests for booking endpoints.
"""

import pytest
from httpx import AsyncClient

from conftest import create_event, create_user
from eventfinder.core.security import Role


@pytest.mark.asyncio
async def test_book_seats(client: AsyncClient, user_headers, test_event):
    """Successful booking decrements available seats and snapshots the price."""
    event_id = test_event.id
    response = await client.post(
        "/api/bookings",
        json={"eventId": event_id, "numberOfSeats": 2, "paymentId": "pay_123", "notes": "Aisle please"},
        headers=user_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["eventId"] == event_id
    assert data["numberOfSeats"] == 2
    assert data["totalPrice"] == 50.0
    assert data["status"] == "confirmed"
    assert data["paymentId"] == "pay_123"
    assert data["bookingRef"].startswith("BK")

    event_response = await client.get(f"/api/events/{event_id}")
    assert event_response.json()["data"]["availableSeats"] == 98


@pytest.mark.asyncio
async def test_book_seats_unauthenticated(client: AsyncClient, test_event):
    response = await client.post("/api/bookings", json={"eventId": test_event.id, "numberOfSeats": 1})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_seats_sold_out(client: AsyncClient, user_headers, sold_out_event):
    """Booking a sold-out event returns 409."""
    response = await client.post(
        "/api/bookings", json={"eventId": sold_out_event.id, "numberOfSeats": 1}, headers=user_headers
    )
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"


@pytest.mark.asyncio
async def test_book_more_than_available(client: AsyncClient, db_session, organizer, user_headers):
    event = await create_event(db_session, organizer, total_seats=3, available_seats=3)
    response = await client.post(
        "/api/bookings", json={"eventId": event.id, "numberOfSeats": 4}, headers=user_headers
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Not enough seats available. Requested: 4, Available: 3"


@pytest.mark.asyncio
async def test_book_over_per_booking_limit(client: AsyncClient, user_headers, test_event):
    response = await client.post(
        "/api/bookings", json={"eventId": test_event.id, "numberOfSeats": 11}, headers=user_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_book_zero_seats(client: AsyncClient, user_headers, test_event):
    response = await client.post(
        "/api/bookings", json={"eventId": test_event.id, "numberOfSeats": 0}, headers=user_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_book_pending_event(client: AsyncClient, user_headers, pending_event):
    response = await client.post(
        "/api/bookings", json={"eventId": pending_event.id, "numberOfSeats": 1}, headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Event is not open for booking"


@pytest.mark.asyncio
async def test_book_nonexistent_event(client: AsyncClient, user_headers):
    response = await client.post(
        "/api/bookings", json={"eventId": 99999, "numberOfSeats": 1}, headers=user_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_same_user_can_book_twice(client: AsyncClient, user_headers, test_event):
    event_id = test_event.id
    first = await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 1}, headers=user_headers)
    second = await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 1}, headers=user_headers)
    assert first.status_code == second.status_code == 201
    assert first.json()["data"]["bookingRef"] != second.json()["data"]["bookingRef"]


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, user_headers, test_event):
    """Cancelling restores seats."""
    event_id = test_event.id
    book_response = await client.post(
        "/api/bookings", json={"eventId": event_id, "numberOfSeats": 3}, headers=user_headers
    )
    booking_id = book_response.json()["data"]["id"]

    cancel_response = await client.put(f"/api/bookings/{booking_id}/cancel", headers=user_headers)
    assert cancel_response.status_code == 200
    assert cancel_response.json()["data"]["status"] == "cancelled"

    event_response = await client.get(f"/api/events/{event_id}")
    assert event_response.json()["data"]["availableSeats"] == 100


@pytest.mark.asyncio
async def test_cancel_twice_does_not_double_credit(client: AsyncClient, user_headers, test_event):
    event_id = test_event.id
    book_response = await client.post(
        "/api/bookings", json={"eventId": event_id, "numberOfSeats": 2}, headers=user_headers
    )
    booking_id = book_response.json()["data"]["id"]
    # A second booking keeps available below total, so a double credit would show
    await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 5}, headers=user_headers)

    await client.put(f"/api/bookings/{booking_id}/cancel", headers=user_headers)
    again = await client.put(f"/api/bookings/{booking_id}/cancel", headers=user_headers)
    assert again.status_code == 200
    assert again.json()["data"]["status"] == "cancelled"

    event_response = await client.get(f"/api/events/{event_id}")
    assert event_response.json()["data"]["availableSeats"] == 95


@pytest.mark.asyncio
async def test_cancel_other_users_booking(client: AsyncClient, user_headers, other_headers, test_event):
    """Cannot cancel someone else's booking."""
    book_response = await client.post(
        "/api/bookings", json={"eventId": test_event.id, "numberOfSeats": 1}, headers=user_headers
    )
    booking_id = book_response.json()["data"]["id"]

    response = await client.put(f"/api/bookings/{booking_id}/cancel", headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancel_nonexistent_booking(client: AsyncClient, user_headers):
    response = await client.put("/api/bookings/99999/cancel", headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_user_bookings(client: AsyncClient, user_headers, other_headers, test_event):
    event_id = test_event.id
    await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 1}, headers=user_headers)
    await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 2}, headers=user_headers)
    await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 1}, headers=other_headers)

    response = await client.get("/api/bookings", headers=user_headers)
    assert response.status_code == 200
    assert sorted(b["numberOfSeats"] for b in response.json()["data"]) == [1, 2]


@pytest.mark.asyncio
async def test_organizer_event_bookings(client: AsyncClient, db_session, test_event, user_headers, organizer_headers):
    event_id = test_event.id
    rival = await create_user(db_session, "rival@example.com", Role.ORGANIZER)

    other_event = await create_event(db_session, rival, title="Rival Gig")
    other_event_id = other_event.id

    await client.post("/api/bookings", json={"eventId": event_id, "numberOfSeats": 1}, headers=user_headers)
    await client.post("/api/bookings", json={"eventId": other_event_id, "numberOfSeats": 1}, headers=user_headers)

    response = await client.get("/api/bookings/organizer/event-bookings", headers=organizer_headers)
    assert response.status_code == 200
    assert [b["eventId"] for b in response.json()["data"]] == [event_id]

    response = await client.get("/api/bookings/organizer/event-bookings", headers=user_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_booking_visibility(
    client: AsyncClient, test_event, user_headers, other_headers, organizer_headers, admin_headers
):
    book_response = await client.post(
        "/api/bookings", json={"eventId": test_event.id, "numberOfSeats": 1}, headers=user_headers
    )
    booking_id = book_response.json()["data"]["id"]

    assert (await client.get(f"/api/bookings/{booking_id}", headers=user_headers)).status_code == 200
    assert (await client.get(f"/api/bookings/{booking_id}", headers=organizer_headers)).status_code == 200
    assert (await client.get(f"/api/bookings/{booking_id}", headers=admin_headers)).status_code == 200
    assert (await client.get(f"/api/bookings/{booking_id}", headers=other_headers)).status_code == 403
