from eventfinder.models.user import User
from eventfinder.models.event import Event, EventStatus, EventCategory
from eventfinder.models.booking import Booking, BookingStatus
from eventfinder.models.wishlist import WishlistEntry

__all__ = [
    "User",
    "Event", "EventStatus", "EventCategory",
    "Booking", "BookingStatus",
    "WishlistEntry",
]
