"""
Admin-only reads and account moderation.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.exceptions import ValidationError
from eventfinder.core.logging import get_logger
from eventfinder.models.booking import Booking, BookingStatus
from eventfinder.models.event import Event, EventStatus
from eventfinder.models.user import User
from eventfinder.services.auth_service import get_user

logger = get_logger(__name__)


async def dashboard_stats(db: AsyncSession) -> dict:
    total_users = (await db.execute(select(func.count(User.id)))).scalar()
    total_events = (await db.execute(select(func.count(Event.id)))).scalar()
    total_bookings = (await db.execute(select(func.count(Booking.id)))).scalar()
    pending_events = (
        await db.execute(select(func.count(Event.id)).where(Event.status == EventStatus.PENDING.value))
    ).scalar()
    total_revenue = (
        await db.execute(
            select(func.coalesce(func.sum(Booking.total_price), 0))
            .where(Booking.status == BookingStatus.CONFIRMED.value)
        )
    ).scalar()

    return {
        "total_users": total_users,
        "total_events": total_events,
        "total_bookings": total_bookings,
        "total_revenue": round(float(total_revenue or 0), 2),
        "pending_events": pending_events,
    }


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def deactivate_user(db: AsyncSession, user_id: int, admin_id: int) -> User:
    """Soft deactivation: the row and its history stay."""
    if user_id == admin_id:
        raise ValidationError("Admins cannot deactivate their own account")

    user = await get_user(db, user_id)
    user.is_active = False
    await db.flush()
    await db.refresh(user)
    logger.info("user_deactivated", user_id=user_id, admin_id=admin_id)
    return user
