"""
Wishlist service. One entry per (user, event); adding twice is not an error.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.exceptions import ForbiddenError, NotFoundError
from eventfinder.core.logging import get_logger
from eventfinder.models.event import Event
from eventfinder.models.wishlist import WishlistEntry

logger = get_logger(__name__)


async def _find_entry(db: AsyncSession, user_id: int, event_id: int):
    result = await db.execute(
        select(WishlistEntry).where(
            WishlistEntry.user_id == user_id,
            WishlistEntry.event_id == event_id,
        )
    )
    return result.scalar_one_or_none()


async def add_to_wishlist(db: AsyncSession, user_id: int, event_id: int) -> tuple[WishlistEntry, bool]:
    """
    Returns (entry, created). An existing entry for the pair is returned
    unchanged with created=False.
    """
    existing = await _find_entry(db, user_id, event_id)
    if existing:
        return existing, False

    if not await db.get(Event, event_id):
        raise NotFoundError(f"Event {event_id} not found")

    entry = WishlistEntry(user_id=user_id, event_id=event_id)
    try:
        async with db.begin_nested():
            db.add(entry)
            await db.flush()
    except IntegrityError:
        # A concurrent add for the same pair won the unique constraint
        existing = await _find_entry(db, user_id, event_id)
        if existing is None:
            raise
        return existing, False

    await db.refresh(entry)
    logger.info("wishlist_added", entry_id=entry.id, user_id=user_id, event_id=event_id)
    return entry, True


async def remove_from_wishlist(db: AsyncSession, user_id: int, ref: int) -> None:
    """
    `ref` may be the entry id or the event id. The caller's own entries are
    matched first (by entry id, then by event id) so an id that happens to
    exist in both namespaces resolves to the caller's entry.
    """
    own = await db.execute(
        select(WishlistEntry)
        .where(WishlistEntry.user_id == user_id, WishlistEntry.id == ref)
    )
    entry = own.scalar_one_or_none() or await _find_entry(db, user_id, ref)

    if entry is None:
        other = await db.get(WishlistEntry, ref)
        if other is not None:
            raise ForbiddenError("Not authorized to delete this item")
        raise NotFoundError("Wishlist item not found")

    logger.info("wishlist_removed", entry_id=entry.id, user_id=user_id, event_id=entry.event_id)
    await db.delete(entry)
    await db.flush()


async def get_wishlist(db: AsyncSession, user_id: int) -> list[tuple[WishlistEntry, Event]]:
    """Newest first. Entries whose event no longer exists are skipped, not deleted."""
    result = await db.execute(
        select(WishlistEntry, Event)
        .join(Event, Event.id == WishlistEntry.event_id)
        .where(WishlistEntry.user_id == user_id)
        .order_by(WishlistEntry.created_at.desc(), WishlistEntry.id.desc())
    )
    return [(entry, event) for entry, event in result.all()]
