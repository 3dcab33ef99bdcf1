"""
Booking service: composes the seat ledger with booking persistence.

Creating a booking is one transaction: the seat decrement and the booking
insert commit together or not at all. Both run inside a savepoint, so an
insert that fails after the seats were taken rolls back to it and releases
them without touching the rest of the request. The only insert failure we
retry is a booking reference collision; the reference is unique at the
storage layer so a collision can never overwrite another row.

Cancelling flips the status with a conditional UPDATE (only from a
non-cancelled state) and releases the seats in the same transaction, so a
second or concurrent cancel finds nothing to flip and releases nothing.
"""

import secrets
import string
import time
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.config import get_settings
from eventfinder.core.exceptions import ForbiddenError, InternalError, NotFoundError, ValidationError
from eventfinder.core.logging import get_logger
from eventfinder.core.metrics import booking_ref_collisions, record_cancellation
from eventfinder.core.security import Identity
from eventfinder.models.booking import Booking, BookingStatus
from eventfinder.models.event import Event
from eventfinder.services.seat_ledger import release_seats, reserve_seats

logger = get_logger(__name__)

MAX_REF_ATTEMPTS = 5
_REF_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_ref() -> str:
    """`BK` + millisecond timestamp + 9 random characters."""
    suffix = "".join(secrets.choice(_REF_ALPHABET) for _ in range(9))
    return f"BK{int(time.time() * 1000)}{suffix}"


async def create_booking(
    db: AsyncSession,
    user_id: int,
    event_id: int,
    seats: int,
    payment_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Booking:
    max_seats = get_settings().MAX_SEATS_PER_BOOKING
    if seats > max_seats:
        raise ValidationError(f"A booking can hold at most {max_seats} seats")

    for attempt in range(1, MAX_REF_ATTEMPTS + 1):
        try:
            # Seat decrement and insert share a savepoint; a failed insert
            # rolls back both and leaves the caller's transaction intact
            async with db.begin_nested():
                total_price = await reserve_seats(db, event_id, user_id, seats)
                booking = Booking(
                    booking_ref=generate_booking_ref(),
                    user_id=user_id,
                    event_id=event_id,
                    number_of_seats=seats,
                    total_price=total_price,
                    status=BookingStatus.CONFIRMED.value,
                    payment_id=payment_id,
                    notes=notes,
                )
                db.add(booking)
                await db.flush()
        except IntegrityError:
            booking_ref_collisions.inc()
            logger.warning("booking_ref_collision", event_id=event_id, attempt=attempt)
            continue

        await db.refresh(booking)
        logger.info(
            "booking_created",
            booking_id=booking.id,
            booking_ref=booking.booking_ref,
            user_id=user_id,
            event_id=event_id,
            seats=seats,
            total_price=total_price,
        )
        return booking

    raise InternalError("Could not allocate a booking reference")


async def cancel_booking(db: AsyncSession, booking_id: int, user_id: int) -> Booking:
    """Cancel the caller's booking and give its seats back. Idempotent."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if booking.user_id != user_id:
        raise ForbiddenError("Not authorized to cancel this booking")

    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.status != BookingStatus.CANCELLED.value,
        )
        .values(status=BookingStatus.CANCELLED.value)
    )

    if result.rowcount == 0:
        record_cancellation(already_cancelled=True)
        logger.info("booking_already_cancelled", booking_id=booking_id, user_id=user_id)
        await db.refresh(booking)
        return booking

    if booking.event_id is not None:
        await release_seats(db, booking.event_id, booking.number_of_seats)

    await db.refresh(booking)
    record_cancellation(already_cancelled=False)
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        user_id=user_id,
        event_id=booking.event_id,
        seats_restored=booking.number_of_seats,
    )
    return booking


async def get_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Get all bookings for a user, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_organizer_event_bookings(db: AsyncSession, organizer_id: int) -> list[Booking]:
    """Bookings across every event owned by the organizer."""
    owned = select(Event.id).where(Event.organizer_id == organizer_id)
    result = await db.execute(
        select(Booking)
        .where(Booking.event_id.in_(owned))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_booking(db: AsyncSession, booking_id: int, identity: Identity) -> Booking:
    """Visible to the booking owner, the event's organizer and admins."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if identity.is_admin or booking.user_id == identity.user_id:
        return booking

    if booking.event_id is not None:
        organizer_id = (
            await db.execute(select(Event.organizer_id).where(Event.id == booking.event_id))
        ).scalar_one_or_none()
        if organizer_id == identity.user_id:
            return booking

    raise ForbiddenError("Not authorized to view this booking")
