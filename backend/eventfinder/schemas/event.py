"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from eventfinder.models.event import EventCategory, EventStatus
from eventfinder.schemas.common import ApiResponse, CamelModel, Pagination

SortBy = Literal["newest", "price_asc", "price_desc", "rating"]


class EventCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: EventCategory
    date: datetime
    time: str = Field(..., min_length=1, max_length=20)
    location: str = Field(..., min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    price: float = Field(..., ge=0)
    total_seats: int = Field(..., gt=0, le=100000)
    images: list[str] = Field(default_factory=list)


class EventUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[EventCategory] = None
    date: Optional[datetime] = None
    time: Optional[str] = Field(None, min_length=1, max_length=20)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    price: Optional[float] = Field(None, ge=0)
    total_seats: Optional[int] = Field(None, gt=0, le=100000)
    images: Optional[list[str]] = None


class RejectRequest(CamelModel):
    reason: str = ""


class FeatureRequest(CamelModel):
    featured: bool = True


class EventResponse(CamelModel):
    id: int
    title: str
    description: str
    category: str
    date: datetime
    time: str
    location: str
    latitude: Optional[float]
    longitude: Optional[float]
    images: list[str]
    organizer_id: int
    organizer_name: str
    price: float
    total_seats: int
    available_seats: int
    is_featured: bool
    is_active: bool
    rating: float
    review_count: int
    status: EventStatus
    admin_note: str
    reviewed_at: Optional[datetime]
    reviewed_by: Optional[int]
    created_at: datetime


class EventListResponse(ApiResponse[list[EventResponse]]):
    pagination: Pagination
