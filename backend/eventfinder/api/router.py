"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from eventfinder.api.routes import admin, auth, bookings, events, users, wishlist
from eventfinder.core.config import get_settings

api_router = APIRouter(prefix=get_settings().API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(wishlist.router)
api_router.include_router(admin.router)
