"""
Wishlist entries: a user's saved events.

`event_id` deliberately carries no foreign key. Deleting an event leaves the
entry in place and wishlist reads drop entries whose event is gone.
"""

from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint

from eventfinder.db.base import Base, TimestampMixin


class WishlistEntry(Base, TimestampMixin):
    __tablename__ = "wishlist_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_wishlist_user_event"),
    )

    def __repr__(self) -> str:
        return f"<WishlistEntry(id={self.id}, user={self.user_id}, event={self.event_id})>"
