from datetime import datetime
from typing import Optional

from eventfinder.schemas.common import CamelModel
from eventfinder.schemas.event import EventResponse


class WishlistAdd(CamelModel):
    event_id: int


class WishlistEntryResponse(CamelModel):
    id: int
    user_id: int
    event_id: int
    created_at: datetime
    event: Optional[EventResponse] = None
