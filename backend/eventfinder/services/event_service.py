"""
Event service: CRUD, public queries and the moderation state machine.

    create ──> pending ──approve──> approved
                  │  ^                 │
           reject │  │ organizer edit  │ reject
                  v  │                 v
               rejected <──────────────┘
                  └──────approve──────> approved

Only admins move an event out of `pending`. Any organizer edit sends the
event back to `pending` and clears the admin note and reviewer stamps.
Moderation transitions are conditional UPDATEs on the current status, so two
admins acting at once cannot both apply a transition from the same state.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.config import get_settings
from eventfinder.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from eventfinder.core.logging import get_logger
from eventfinder.core.metrics import record_moderation
from eventfinder.core.security import Identity
from eventfinder.models.event import Event, EventStatus
from eventfinder.models.user import User
from eventfinder.schemas.event import EventCreate, EventUpdate

logger = get_logger(__name__)

MIN_REJECT_REASON_LENGTH = 5

_SORT_OPTIONS = {
    "newest": (Event.created_at.desc(), Event.id.desc()),
    "price_asc": (Event.price.asc(), Event.id.asc()),
    "price_desc": (Event.price.desc(), Event.id.desc()),
    "rating": (Event.rating.desc(), Event.id.desc()),
}


def _public_filter():
    return (Event.status == EventStatus.APPROVED.value, Event.is_active.is_(True))


def _ensure_future(date: datetime) -> None:
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    if date <= datetime.now(timezone.utc):
        raise ValidationError("Event date must be in the future")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def create_event(db: AsyncSession, event_data: EventCreate, organizer_id: int) -> Event:
    """Create a new event awaiting moderation, with every seat available."""
    _ensure_future(event_data.date)

    organizer_name = (
        await db.execute(select(User.name).where(User.id == organizer_id))
    ).scalar_one_or_none()

    event = Event(
        title=event_data.title.strip(),
        description=event_data.description,
        category=event_data.category.value,
        date=event_data.date,
        time=event_data.time,
        location=event_data.location,
        latitude=event_data.latitude,
        longitude=event_data.longitude,
        images=list(event_data.images),
        organizer_id=organizer_id,
        organizer_name=organizer_name or "Organizer",
        price=event_data.price,
        total_seats=event_data.total_seats,
        available_seats=event_data.total_seats,
        status=EventStatus.PENDING.value,
        admin_note="",
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, seats=event.total_seats, organizer_id=organizer_id)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID regardless of status."""
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def get_visible_event(db: AsyncSession, event_id: int, viewer: Optional[Identity]) -> Event:
    """
    Public callers only see approved, active events. The owner and admins see
    the event in any state. Hidden events answer 404 so their existence does
    not leak.
    """
    event = await get_event(db, event_id)
    if event.is_public:
        return event
    if viewer is not None and (viewer.is_admin or viewer.user_id == event.organizer_id):
        return event
    raise NotFoundError(f"Event {event_id} not found")


async def list_public_events(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    sort_by: str = "newest",
) -> tuple[list[Event], int]:
    """Approved and active events, paginated."""
    query = select(Event).where(*_public_filter())
    if category:
        query = query.where(Event.category == category)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(*_SORT_OPTIONS.get(sort_by, _SORT_OPTIONS["newest"]))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(events_query)
    return list(result.scalars().all()), total


async def list_featured_events(db: AsyncSession) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(*_public_filter(), Event.is_featured.is_(True))
        .order_by(Event.date.asc(), Event.id.asc())
        .limit(get_settings().FEATURED_LIMIT)
    )
    return list(result.scalars().all())


async def search_events(db: AsyncSession, q: Optional[str]) -> list[Event]:
    """Case-insensitive substring match on title, description, location or category."""
    term = (q or "").strip()
    if not term:
        raise ValidationError("Search query required")

    pattern = f"%{_escape_like(term)}%"
    result = await db.execute(
        select(Event)
        .where(
            *_public_filter(),
            or_(
                Event.title.ilike(pattern, escape="\\"),
                Event.description.ilike(pattern, escape="\\"),
                Event.location.ilike(pattern, escape="\\"),
                Event.category.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(Event.date.asc(), Event.id.asc())
    )
    return list(result.scalars().all())


async def list_organizer_events(db: AsyncSession, organizer_id: int) -> list[Event]:
    """An organizer's own events in every moderation state."""
    result = await db.execute(
        select(Event)
        .where(Event.organizer_id == organizer_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return list(result.scalars().all())


async def list_all_events(db: AsyncSession, status: Optional[EventStatus] = None) -> list[Event]:
    query = select(Event)
    if status is not None:
        query = query.where(Event.status == EventStatus(status).value)
    result = await db.execute(query.order_by(Event.created_at.desc(), Event.id.desc()))
    return list(result.scalars().all())


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate, organizer_id: int) -> Event:
    """
    Organizer edit of their own event. Always resubmits for moderation.

    `total_seats` may only change while nothing is booked; the check and the
    write are a single UPDATE so a concurrent reservation cannot slip in.
    """
    event = await get_event(db, event_id)
    if event.organizer_id != organizer_id:
        raise ForbiddenError("Not authorized to update this event")

    changes = event_data.model_dump(exclude_unset=True, exclude_none=True)
    if "date" in changes:
        _ensure_future(changes["date"])

    new_total = changes.pop("total_seats", None)
    if new_total is not None and new_total != event.total_seats:
        result = await db.execute(
            update(Event)
            .where(Event.id == event_id, Event.available_seats == Event.total_seats)
            .values(total_seats=new_total, available_seats=new_total)
        )
        if result.rowcount == 0:
            raise ConflictError("Total seats cannot change once bookings exist")

    if "category" in changes:
        changes["category"] = changes["category"].value
    if "title" in changes:
        changes["title"] = changes["title"].strip()

    for field, value in changes.items():
        setattr(event, field, value)

    event.status = EventStatus.PENDING.value
    event.admin_note = ""
    event.reviewed_at = None
    event.reviewed_by = None

    await db.flush()
    await db.refresh(event)

    record_moderation("resubmit")
    logger.info("event_resubmitted", event_id=event.id, organizer_id=organizer_id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, event_id: int, identity: Identity) -> None:
    """
    Owner or admin may delete, but only while no seats are held by
    non-cancelled bookings.
    """
    event = await get_event(db, event_id)
    if event.organizer_id != identity.user_id and not identity.is_admin:
        raise ForbiddenError("Not authorized to delete this event")

    result = await db.execute(
        delete(Event).where(Event.id == event_id, Event.available_seats == Event.total_seats)
    )
    if result.rowcount == 0:
        raise ConflictError("Event has active bookings; cancel them before deleting")

    logger.info("event_deleted", event_id=event_id, deleted_by=identity.user_id)


async def _transition(
    db: AsyncSession,
    event_id: int,
    allowed_from: tuple[EventStatus, ...],
    values: dict,
) -> Event:
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.status.in_([s.value for s in allowed_from]))
        .values(**values)
    )
    event = await get_event(db, event_id)
    if result.rowcount == 0:
        raise ConflictError(f"Event is already {event.status}")
    await db.refresh(event)
    return event


async def approve_event(db: AsyncSession, event_id: int, admin_id: int) -> Event:
    event = await _transition(
        db,
        event_id,
        (EventStatus.PENDING, EventStatus.REJECTED),
        {
            "status": EventStatus.APPROVED.value,
            "admin_note": "",
            "reviewed_at": datetime.now(timezone.utc),
            "reviewed_by": admin_id,
        },
    )
    record_moderation("approve")
    logger.info("event_approved", event_id=event_id, admin_id=admin_id)
    return event


async def reject_event(db: AsyncSession, event_id: int, admin_id: int, reason: Optional[str]) -> Event:
    reason = (reason or "").strip()
    if len(reason) < MIN_REJECT_REASON_LENGTH:
        raise ValidationError(f"Please provide a rejection reason (min {MIN_REJECT_REASON_LENGTH} characters)")

    event = await _transition(
        db,
        event_id,
        (EventStatus.PENDING, EventStatus.APPROVED),
        {
            "status": EventStatus.REJECTED.value,
            "admin_note": reason,
            "reviewed_at": datetime.now(timezone.utc),
            "reviewed_by": admin_id,
        },
    )
    record_moderation("reject")
    logger.info("event_rejected", event_id=event_id, admin_id=admin_id, reason=reason)
    return event


async def set_featured(db: AsyncSession, event_id: int, featured: bool = True) -> Event:
    event = await get_event(db, event_id)
    event.is_featured = featured
    await db.flush()
    await db.refresh(event)
    logger.info("event_featured", event_id=event_id, featured=featured)
    return event
