"""
Seat ledger: the only writer of an event's seat counters.

CONCURRENCY STRATEGY: Atomic Conditional Update
================================================

Problem:
  Two users try to book the last seat simultaneously.
  Both read available_seats=1, both decrement to 0, both succeed.
  Result: Overbooking.

Solution:
  The check and the write are one statement:

    UPDATE events SET available_seats = available_seats - :n
    WHERE id = :event_id
      AND status = 'approved' AND is_active
      AND available_seats >= :n

  The database takes the row lock for the UPDATE, so concurrent reservations
  against the same event serialize on that row no matter how many API
  processes are running. rows_affected == 0 means the reservation was refused;
  only then do we read the row to work out why.

  Releases use the same pattern and are clamped so available_seats never
  exceeds total_seats. The CHECK constraints on the table stay the final
  safety net.

Callers own the transaction. A reservation that is not followed by a
successful booking insert is undone by rolling back the enclosing
savepoint or transaction.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.exceptions import ConflictError, NotFoundError, ValidationError
from eventfinder.core.logging import get_logger
from eventfinder.core.metrics import seat_ledger_retries
from eventfinder.models.event import Event, EventStatus

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 3


async def reserve_seats(db: AsyncSession, event_id: int, user_id: int, seats: int) -> float:
    """
    Atomically take `seats` seats from an event.

    Returns the price snapshot (event price x seats) for the booking record.
    """
    if seats < 1:
        raise ValidationError("Number of seats must be at least 1")

    for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
        result = await db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.status == EventStatus.APPROVED.value,
                Event.is_active.is_(True),
                Event.available_seats >= seats,
            )
            .values(available_seats=Event.available_seats - seats)
        )

        if result.rowcount == 1:
            price = (await db.execute(select(Event.price).where(Event.id == event_id))).scalar_one()
            logger.info(
                "seats_reserved",
                event_id=event_id,
                user_id=user_id,
                seats=seats,
                attempt=attempt,
            )
            return round(float(price) * seats, 2)

        # Refused: read the row to report the reason
        row = (
            await db.execute(
                select(Event.status, Event.is_active, Event.available_seats).where(Event.id == event_id)
            )
        ).one_or_none()

        if row is None:
            raise NotFoundError(f"Event {event_id} not found")

        status, is_active, available = row
        if status != EventStatus.APPROVED.value or not is_active:
            raise ValidationError("Event is not open for booking")

        if available < seats:
            logger.warning(
                "booking_failed_no_seats",
                event_id=event_id,
                requested=seats,
                available=available,
            )
            raise ConflictError(f"Not enough seats available. Requested: {seats}, Available: {available}")

        # Seats were freed between the UPDATE and the read; try again
        seat_ledger_retries.inc()
        logger.info("seat_reservation_retry", event_id=event_id, attempt=attempt)

    raise ConflictError("Booking failed due to high demand. Please try again.")


async def release_seats(db: AsyncSession, event_id: int, seats: int) -> None:
    """Atomically return `seats` seats to an event, never above its total."""
    if seats < 1:
        raise ValidationError("Number of seats must be at least 1")

    result = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            Event.available_seats + seats <= Event.total_seats,
        )
        .values(available_seats=Event.available_seats + seats)
    )
    if result.rowcount == 1:
        logger.info("seats_released", event_id=event_id, seats=seats)
        return

    # Either the event is gone or the release would overshoot the total.
    clamped = await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(available_seats=Event.total_seats)
    )
    if clamped.rowcount == 1:
        logger.warning("seat_release_clamped", event_id=event_id, seats=seats)
    else:
        logger.warning("seat_release_event_missing", event_id=event_id, seats=seats)
