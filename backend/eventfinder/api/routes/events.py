"""
Event endpoints: public discovery, organizer management and admin moderation.

Static paths are declared before `/{event_id}` so they are never captured by it.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.api.deps import get_optional_identity, require_admin, require_organizer
from eventfinder.core.logging import get_logger
from eventfinder.core.security import Identity
from eventfinder.db.session import get_db
from eventfinder.models.event import EventCategory, EventStatus
from eventfinder.schemas.common import ApiResponse, Pagination
from eventfinder.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    RejectRequest,
    SortBy,
)
from eventfinder.services import event_service
from eventfinder.services.cache_service import commit_and_invalidate, get_cached_events, set_cached_events

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


def _many(events) -> list[EventResponse]:
    return [EventResponse.model_validate(e) for e in events]


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[EventCategory] = Query(None),
    sort_by: SortBy = Query("newest", alias="sortBy"),
    db: AsyncSession = Depends(get_db),
):
    """
    Approved, active events with pagination.
    Results are cached in Redis; any event or seat change invalidates them.
    """
    category_value = category.value if category else None

    cached = await get_cached_events(page, limit, category_value, sort_by)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        return EventListResponse.model_validate(cached)

    events, total = await event_service.list_public_events(db, page, limit, category_value, sort_by)
    response = EventListResponse(
        message="Events fetched successfully",
        status=status.HTTP_200_OK,
        data=_many(events),
        pagination=Pagination(total=total, page=page, pages=math.ceil(total / limit)),
    )

    await set_cached_events(page, limit, category_value, sort_by, response.model_dump(mode="json"))
    return response


@router.get("/featured", response_model=ApiResponse[list[EventResponse]])
async def featured_events_endpoint(db: AsyncSession = Depends(get_db)):
    events = await event_service.list_featured_events(db)
    return ApiResponse(message="Featured events fetched successfully", status=status.HTTP_200_OK, data=_many(events))


@router.get("/search/query", response_model=ApiResponse[list[EventResponse]])
async def search_events_endpoint(
    q: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    events = await event_service.search_events(db, q)
    return ApiResponse(message="Search results", status=status.HTTP_200_OK, data=_many(events))


@router.get("/organizer/my-events", response_model=ApiResponse[list[EventResponse]])
async def my_events_endpoint(
    identity: Identity = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own events in every moderation state, with admin notes."""
    events = await event_service.list_organizer_events(db, identity.user_id)
    return ApiResponse(message="Your events fetched", status=status.HTTP_200_OK, data=_many(events))


@router.get("/admin/all", response_model=ApiResponse[list[EventResponse]])
async def admin_all_events_endpoint(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    _: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    events = await event_service.list_all_events(db, status_filter)
    return ApiResponse(message="All events fetched", status=status.HTTP_200_OK, data=_many(events))


@router.get("/admin/pending", response_model=ApiResponse[list[EventResponse]])
async def admin_pending_events_endpoint(
    _: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    events = await event_service.list_all_events(db, EventStatus.PENDING)
    return ApiResponse(message="Pending events fetched", status=status.HTTP_200_OK, data=_many(events))


@router.get("/{event_id}", response_model=ApiResponse[EventResponse])
async def get_event_endpoint(
    event_id: int,
    viewer: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get a single event. Not cached (needs real-time seat counts)."""
    event = await event_service.get_visible_event(db, event_id, viewer)
    return ApiResponse(
        message="Event fetched successfully",
        status=status.HTTP_200_OK,
        data=EventResponse.model_validate(event),
    )


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    identity: Identity = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    """Create an event. It stays hidden until an admin approves it."""
    event = await event_service.create_event(db, event_data, identity.user_id)
    await commit_and_invalidate(db)
    return ApiResponse(
        message="Event submitted for admin approval.",
        status=status.HTTP_201_CREATED,
        data=EventResponse.model_validate(event),
    )


@router.put("/{event_id}", response_model=ApiResponse[EventResponse])
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    identity: Identity = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.update_event(db, event_id, event_data, identity.user_id)
    await commit_and_invalidate(db)
    return ApiResponse(
        message="Event updated and resubmitted for approval",
        status=status.HTTP_200_OK,
        data=EventResponse.model_validate(event),
    )


@router.delete("/{event_id}", response_model=ApiResponse[None])
async def delete_event_endpoint(
    event_id: int,
    identity: Identity = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    await event_service.delete_event(db, event_id, identity)
    await commit_and_invalidate(db)
    return ApiResponse(message="Event deleted successfully", status=status.HTTP_200_OK)


@router.patch("/{event_id}/approve", response_model=ApiResponse[EventResponse])
async def approve_event_endpoint(
    event_id: int,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.approve_event(db, event_id, identity.user_id)
    await commit_and_invalidate(db)
    return ApiResponse(
        message=f'"{event.title}" approved and now visible on events page',
        status=status.HTTP_200_OK,
        data=EventResponse.model_validate(event),
    )


@router.patch("/{event_id}/reject", response_model=ApiResponse[EventResponse])
async def reject_event_endpoint(
    event_id: int,
    body: RejectRequest,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.reject_event(db, event_id, identity.user_id, body.reason)
    await commit_and_invalidate(db)
    return ApiResponse(
        message=f'"{event.title}" rejected. Organizer will see reason in My Events.',
        status=status.HTTP_200_OK,
        data=EventResponse.model_validate(event),
    )
