from eventfinder.schemas.common import ApiResponse, Pagination
from eventfinder.schemas.user import UserCreate, UserLogin, UserResponse, PublicUserResponse, ProfileUpdate, AuthPayload
from eventfinder.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse, RejectRequest, FeatureRequest, SortBy
from eventfinder.schemas.booking import BookingCreate, BookingResponse
from eventfinder.schemas.wishlist import WishlistAdd, WishlistEntryResponse
from eventfinder.schemas.admin import DashboardStats

__all__ = [
    "ApiResponse", "Pagination",
    "UserCreate", "UserLogin", "UserResponse", "PublicUserResponse", "ProfileUpdate", "AuthPayload",
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse", "RejectRequest", "FeatureRequest", "SortBy",
    "BookingCreate", "BookingResponse",
    "WishlistAdd", "WishlistEntryResponse",
    "DashboardStats",
]
