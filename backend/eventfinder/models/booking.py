"""
Booking model representing a user's seat reservation for an event.

Key design decisions:
- Status field allows cancellation without deleting records; a cancelled
  booking is terminal
- `total_price` is a snapshot of price x seats at creation time
- `booking_ref` is unique at the storage layer so a generated collision fails
  the insert instead of overwriting
- `event_id` is nulled if the event row is ever removed, history is kept
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, CheckConstraint

from eventfinder.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_ref = Column(String(40), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True)
    number_of_seats = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    payment_id = Column(String(255), nullable=True)
    notes = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint("number_of_seats > 0", name="check_booking_seats_positive"),
        CheckConstraint("total_price >= 0", name="check_booking_price_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, ref={self.booking_ref}, user={self.user_id}, "
            f"event={self.event_id}, status={self.status})>"
        )
