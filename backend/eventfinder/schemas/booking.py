"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from eventfinder.models.booking import BookingStatus
from eventfinder.schemas.common import CamelModel


class BookingCreate(CamelModel):
    event_id: int
    number_of_seats: int = Field(default=1, gt=0)
    payment_id: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)


class BookingResponse(CamelModel):
    id: int
    booking_ref: str
    user_id: int
    event_id: Optional[int]
    number_of_seats: int
    total_price: float
    status: BookingStatus
    payment_id: Optional[str]
    notes: Optional[str]
    created_at: datetime
