"""
Async engine and per-request session dependency.

One session (and one transaction) per request: services only flush, the
dependency commits on success and rolls back on any exception.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventfinder.core.config import get_settings

settings = get_settings()


def _connect_args(url: str) -> dict:
    # Bound every storage call so a request can never hang on the database
    if url.startswith("postgresql+asyncpg"):
        return {
            "command_timeout": settings.DB_STATEMENT_TIMEOUT,
            "server_settings": {"statement_timeout": str(settings.DB_STATEMENT_TIMEOUT * 1000)},
        }
    if url.startswith("sqlite"):
        return {"timeout": settings.DB_STATEMENT_TIMEOUT}
    return {}


def build_engine(url: str):
    kwargs = {"echo": settings.DEBUG, "connect_args": _connect_args(url)}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
        )
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
