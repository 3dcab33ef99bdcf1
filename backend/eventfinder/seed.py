"""
Development seed: resets the database to three demo accounts and a handful
of approved events.

    python -m eventfinder.seed
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete

from eventfinder.core.config import get_settings
from eventfinder.core.logging import get_logger, setup_logging
from eventfinder.core.security import Role, hash_password
from eventfinder.db.session import AsyncSessionLocal, engine
from eventfinder.models import Booking, Event, EventStatus, User, WishlistEntry

settings = get_settings()
logger = get_logger(__name__)

SAMPLE_EVENTS = [
    {
        "title": "Tech Conference",
        "description": "Industry experts discussing the latest innovations in technology.",
        "category": "Technology",
        "days_ahead": 30,
        "time": "09:00",
        "location": "Convention Center, New York",
        "latitude": 40.7128,
        "longitude": -74.006,
        "price": 50,
        "total_seats": 500,
        "is_featured": True,
        "rating": 4.5,
        "review_count": 50,
    },
    {
        "title": "Music Festival",
        "description": "Performances from international and local music artists.",
        "category": "Music",
        "days_ahead": 45,
        "time": "18:00",
        "location": "Central Park, New York",
        "latitude": 40.785,
        "longitude": -73.968,
        "price": 75,
        "total_seats": 1000,
        "is_featured": True,
        "rating": 4.8,
        "review_count": 120,
    },
    {
        "title": "City Marathon",
        "description": "A 10K run through the city with thousands of runners.",
        "category": "Sports",
        "days_ahead": 20,
        "time": "07:00",
        "location": "Downtown District",
        "latitude": 40.758,
        "longitude": -73.985,
        "price": 30,
        "total_seats": 2000,
        "is_featured": False,
        "rating": 4.2,
        "review_count": 80,
    },
    {
        "title": "Art Exhibition Opening",
        "description": "Contemporary works from local and international artists.",
        "category": "Arts",
        "days_ahead": 10,
        "time": "19:00",
        "location": "Modern Art Gallery",
        "latitude": 40.7614,
        "longitude": -73.9776,
        "price": 0,
        "total_seats": 200,
        "is_featured": False,
        "rating": 4.6,
        "review_count": 35,
    },
]


def _user(name: str, email: str, role: Role, password_hash: str, phone=None) -> User:
    return User(
        name=name,
        email=email,
        hashed_password=password_hash,
        role=role.value,
        phone=phone,
        is_verified=True,
        is_active=True,
    )


async def seed() -> None:
    password_hash = hash_password(settings.SEED_PASSWORD)

    async with AsyncSessionLocal() as db:
        for model in (WishlistEntry, Booking, Event, User):
            await db.execute(delete(model))

        admin = _user("Admin User", settings.SEED_ADMIN_EMAIL, Role.ADMIN, password_hash)
        organizer = _user("Event Organizer", "organizer@test.com", Role.ORGANIZER, password_hash, "+94771234567")
        user = _user("Regular User", "user@test.com", Role.USER, password_hash, "+94771234568")
        db.add_all([admin, organizer, user])
        await db.flush()

        now = datetime.now(timezone.utc)
        for sample in SAMPLE_EVENTS:
            data = dict(sample)
            days_ahead = data.pop("days_ahead")
            db.add(
                Event(
                    **data,
                    date=now + timedelta(days=days_ahead),
                    images=[],
                    organizer_id=organizer.id,
                    organizer_name=organizer.name,
                    available_seats=data["total_seats"],
                    status=EventStatus.APPROVED.value,
                    reviewed_at=now,
                    reviewed_by=admin.id,
                )
            )

        await db.commit()

    logger.info("database_seeded", users=3, events=len(SAMPLE_EVENTS))


async def main() -> None:
    setup_logging()
    try:
        await seed()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
