"""
Booking endpoints with concurrency-safe seat reservation.
"""

import time

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.api.deps import require_organizer, require_user
from eventfinder.core.exceptions import AppError, ConflictError
from eventfinder.core.metrics import booking_latency, record_booking_attempt
from eventfinder.core.security import Identity
from eventfinder.db.session import get_db
from eventfinder.schemas.booking import BookingCreate, BookingResponse
from eventfinder.schemas.common import ApiResponse
from eventfinder.services import booking_service
from eventfinder.services.cache_service import commit_and_invalidate

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _many(bookings) -> list[BookingResponse]:
    return [BookingResponse.model_validate(b) for b in bookings]


@router.post("", response_model=ApiResponse[BookingResponse], status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Book seats for an approved event.

    The seat decrement is a single conditional UPDATE, so concurrent bookings
    can never take more seats than the event has. Returns 409 when the seats
    are gone.
    """
    start = time.perf_counter()
    try:
        booking = await booking_service.create_booking(
            db,
            identity.user_id,
            booking_data.event_id,
            booking_data.number_of_seats,
            payment_id=booking_data.payment_id,
            notes=booking_data.notes,
        )
    except ConflictError:
        record_booking_attempt("conflict")
        raise
    except AppError:
        record_booking_attempt("rejected")
        raise
    except Exception:
        record_booking_attempt("error")
        raise
    finally:
        booking_latency.observe(time.perf_counter() - start)

    record_booking_attempt("success")
    # Listing shows available seats
    await commit_and_invalidate(db)
    return ApiResponse(
        message="Booking created successfully",
        status=status.HTTP_201_CREATED,
        data=BookingResponse.model_validate(booking),
    )


@router.get("", response_model=ApiResponse[list[BookingResponse]])
async def list_user_bookings(
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings for the authenticated user."""
    bookings = await booking_service.get_user_bookings(db, identity.user_id)
    return ApiResponse(message="Bookings fetched successfully", status=status.HTTP_200_OK, data=_many(bookings))


@router.get("/organizer/event-bookings", response_model=ApiResponse[list[BookingResponse]])
async def organizer_event_bookings(
    identity: Identity = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """Bookings across all events owned by the caller."""
    bookings = await booking_service.get_organizer_event_bookings(db, identity.user_id)
    return ApiResponse(message="Event bookings fetched successfully", status=status.HTTP_200_OK, data=_many(bookings))


@router.get("/{booking_id}", response_model=ApiResponse[BookingResponse])
async def get_booking_endpoint(
    booking_id: int,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_service.get_booking(db, booking_id, identity)
    return ApiResponse(
        message="Booking fetched successfully",
        status=status.HTTP_200_OK,
        data=BookingResponse.model_validate(booking),
    )


@router.put("/{booking_id}/cancel", response_model=ApiResponse[BookingResponse])
async def cancel_booking_endpoint(
    booking_id: int,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and release seats back to the event. Repeating it is a no-op."""
    booking = await booking_service.cancel_booking(db, booking_id, identity.user_id)
    await commit_and_invalidate(db)
    return ApiResponse(
        message="Booking cancelled successfully",
        status=status.HTTP_200_OK,
        data=BookingResponse.model_validate(booking),
    )
