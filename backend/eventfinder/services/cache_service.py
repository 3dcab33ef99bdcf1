"""
Redis caching service for the public event listing.

CACHING STRATEGY
================

What we cache:
  - Public event listing responses (paginated, JSON-serialized)
  - Cache key pattern: "events:list:page={page}&limit={limit}&category={category}&sort={sort}"

Why:
  - The public listing is the most frequent read from the mobile app
  - It only changes on moderation, event edits and seat changes

Invalidation strategy:
  - Any event create/edit/delete/approve/reject/feature and any booking or
    cancellation deletes every "events:list:*" key
  - TTL-based expiry as safety net (5 minutes)

Why NOT cache individual events:
  - Booking needs real-time seat counts; the seat ledger always reads the DB
  - Single-event reads depend on who is asking (owner/admin see hidden events)

Redis is advisory only. Every failure is logged and the caller falls back to
the database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.config import get_settings
from eventfinder.core.logging import get_logger
from eventfinder.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except (RedisError, OSError) as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_event_list_key(page: int, limit: int, category: Optional[str], sort_by: str) -> str:
    return f"events:list:page={page}&limit={limit}&category={category or ''}&sort={sort_by}"


async def get_cached_events(page: int, limit: int, category: Optional[str], sort_by: str) -> Optional[dict]:
    """Retrieve cached event list response."""
    client = await get_redis()
    if not client:
        return None

    key = _make_event_list_key(page, limit, category, sort_by)
    try:
        data = await client.get(key)
        record_cache_operation("get", "hit" if data is not None else "miss")
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except (RedisError, ValueError) as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_events(
    page: int,
    limit: int,
    category: Optional[str],
    sort_by: str,
    data: dict,
) -> None:
    """Cache event list response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = _make_event_list_key(page, limit, category, sort_by)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", "stored")
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """
    Invalidate all cached event listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match="events:list:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))


async def commit_and_invalidate(db: AsyncSession) -> None:
    """
    Commit the request's writes, then invalidate the listings.

    Must run after the commit: a reader that misses in between would cache
    the old rows until the TTL expires.
    """
    await db.commit()
    await invalidate_event_cache()


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except RedisError as e:
        return {"status": "error", "error": str(e)}
