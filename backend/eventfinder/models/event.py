"""
Event model with moderation state and seat inventory.

Key design decisions:
- `available_seats` is denormalized; it always equals `total_seats` minus the
  seats held by non-cancelled bookings. Only the seat ledger writes it, and
  only through single-statement conditional UPDATEs.
- CHECK constraints are the final safety net against negative or excess seats.
- There is no ORM relationship to bookings: `bookings.event_id` is the source
  of truth and the event's booking list is a query, never a stored array.
"""

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)

from eventfinder.db.base import Base, TimestampMixin


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventCategory(str, enum.Enum):
    MUSIC = "Music"
    SPORTS = "Sports"
    TECHNOLOGY = "Technology"
    ARTS = "Arts"
    FOOD_AND_DRINK = "Food & Drink"
    ENTERTAINMENT = "Entertainment"
    BUSINESS = "Business"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    time = Column(String(20), nullable=False)
    location = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    images = Column(JSON, nullable=False, default=list)

    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Cached display name, resolved from the organizer's user row at creation
    organizer_name = Column(String(100), nullable=False, default="")

    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)

    is_featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    # Moderation
    status = Column(String(20), nullable=False, default=EventStatus.PENDING.value)
    admin_note = Column(String(1000), nullable=False, default="")
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="check_available_seats_non_negative"),
        CheckConstraint("total_seats > 0", name="check_total_seats_positive"),
        CheckConstraint("available_seats <= total_seats", name="check_available_lte_total"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="check_event_status"),
        # Every public read filters on these two columns
        Index("ix_events_status_active", "status", "is_active"),
        Index("ix_events_date", "date"),
        Index("ix_events_category", "category"),
    )

    @property
    def is_public(self) -> bool:
        return self.status == EventStatus.APPROVED.value and bool(self.is_active)

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title={self.title}, status={self.status}, "
            f"available={self.available_seats}/{self.total_seats})>"
        )
