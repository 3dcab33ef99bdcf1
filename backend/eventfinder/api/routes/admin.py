"""
Admin dashboard and account moderation endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.api.deps import require_admin
from eventfinder.core.security import Identity
from eventfinder.db.session import get_db
from eventfinder.schemas.admin import DashboardStats
from eventfinder.schemas.common import ApiResponse
from eventfinder.schemas.event import EventResponse, FeatureRequest
from eventfinder.schemas.user import UserResponse
from eventfinder.services import admin_service, event_service
from eventfinder.services.cache_service import commit_and_invalidate

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/dashboard/stats", response_model=ApiResponse[DashboardStats])
async def dashboard_stats_endpoint(db: AsyncSession = Depends(get_db)):
    stats = await admin_service.dashboard_stats(db)
    return ApiResponse(message="Dashboard stats", status=status.HTTP_200_OK, data=DashboardStats(**stats))


@router.get("/users/list", response_model=ApiResponse[list[UserResponse]])
async def list_users_endpoint(db: AsyncSession = Depends(get_db)):
    users = await admin_service.list_users(db)
    return ApiResponse(
        message="Users fetched",
        status=status.HTTP_200_OK,
        data=[UserResponse.model_validate(u) for u in users],
    )


@router.get("/events/list", response_model=ApiResponse[list[EventResponse]])
async def list_events_endpoint(db: AsyncSession = Depends(get_db)):
    events = await event_service.list_all_events(db)
    return ApiResponse(
        message="Events fetched",
        status=status.HTTP_200_OK,
        data=[EventResponse.model_validate(e) for e in events],
    )


@router.put("/users/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
async def deactivate_user_endpoint(
    user_id: int,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await admin_service.deactivate_user(db, user_id, identity.user_id)
    return ApiResponse(message="User deactivated", status=status.HTTP_200_OK, data=UserResponse.model_validate(user))


@router.put("/events/{event_id}/feature", response_model=ApiResponse[EventResponse])
async def feature_event_endpoint(
    event_id: int,
    body: Optional[FeatureRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """Without a body the event is featured."""
    featured = body.featured if body else True
    event = await event_service.set_featured(db, event_id, featured)
    await commit_and_invalidate(db)
    return ApiResponse(
        message="Event featured" if featured else "Event unfeatured",
        status=status.HTTP_200_OK,
        data=EventResponse.model_validate(event),
    )
