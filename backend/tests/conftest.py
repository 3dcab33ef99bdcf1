"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh SQLite file (or TEST_DATABASE_URL when set) with the
schema created from the models. The API runs against its own sessions, one
per request like in production, so the test session only sets up data and
reads back the results.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event as sa_event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventfinder.core.security import Role, create_access_token, hash_password
from eventfinder.db.base import Base
from eventfinder.db.session import build_engine, get_db
from eventfinder.main import app
from eventfinder.models.event import Event, EventStatus
from eventfinder.models.user import User

TEST_PASSWORD = "testpassword123"


def future_date(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def database_url(tmp_path) -> str:
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def engine(database_url: str):
    """Create tables, yield the engine, then drop tables for isolation."""
    test_engine = build_engine(database_url)
    if database_url.startswith("sqlite"):
        sa_event.listen(test_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests get their own session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db: AsyncSession, email: str, role: Role = Role.USER, name: str = "Test User") -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_event(db: AsyncSession, organizer: User, **overrides) -> Event:
    values = dict(
        title="Test Concert",
        description="A test event",
        category="Music",
        date=future_date(),
        time="19:00",
        location="Test Venue",
        organizer_id=organizer.id,
        organizer_name=organizer.name,
        price=25.0,
        total_seats=100,
        available_seats=100,
        status=EventStatus.APPROVED.value,
        images=[],
    )
    values.update(overrides)
    event = Event(**values)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


def headers_for(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "user@example.com", Role.USER, name="Regular User")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "other@example.com", Role.USER, name="Other User")


@pytest_asyncio.fixture
async def organizer(db_session: AsyncSession) -> User:
    return await create_user(db_session, "organizer@example.com", Role.ORGANIZER, name="Event Organizer")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin@example.com", Role.ADMIN, name="Admin User")


@pytest.fixture
def user_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return headers_for(other_user)


@pytest.fixture
def organizer_headers(organizer: User) -> dict:
    return headers_for(organizer)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, organizer: User) -> Event:
    """Approved event with 100 seats at 25.0 each."""
    return await create_event(db_session, organizer)


@pytest_asyncio.fixture
async def pending_event(db_session: AsyncSession, organizer: User) -> Event:
    return await create_event(db_session, organizer, title="Pending Meetup", status=EventStatus.PENDING.value)


@pytest_asyncio.fixture
async def sold_out_event(db_session: AsyncSession, organizer: User) -> Event:
    return await create_event(db_session, organizer, title="Sold Out Show", total_seats=50, available_seats=0)


def event_payload(**overrides) -> dict:
    payload = {
        "title": "Tech Talk",
        "description": "An evening of lightning talks",
        "category": "Technology",
        "date": future_date().isoformat(),
        "time": "18:30",
        "location": "Innovation Hub",
        "price": 15.0,
        "totalSeats": 10,
    }
    payload.update(overrides)
    return payload
