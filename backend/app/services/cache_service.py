"""
Redis caching service for venue availability.

CACHING STRATEGY
================

What we cache:
  - Available-dates responses per venue and window (JSON-serialized)
  - Cache key pattern: "venues:{venue_id}:v{version}:available:{start}:{end}"

Why:
  - Calendar views ask for the same month over and over
  - Enumerating a window runs the full rules engine once per day

Invalidation strategy:
  - Every calendar change bumps the venue version, so a window computed from
    an older calendar is stored under a key that is never read again. This
    covers readers that started before a booking committed and write their
    result after it.
  - After a booking change commits (create, cancel, reschedule, calendar
    rebuild) every "venues:{venue_id}:*" key is deleted to free the memory
  - TTL-based expiry as safety net (5 minutes)

The result does not depend on "today" (only the floor, the Monday rule and
the calendar), so a cached window stays correct until the calendar changes.

Cache failures never fail a request: they are logged and treated as misses.
"""

import json
from typing import Optional

import redis.asyncio as redis

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
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
        except Exception as e:
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


def _make_available_dates_key(venue_id: int, version: int, start: str, end: str) -> str:
    return f"venues:{venue_id}:v{version}:available:{start}:{end}"


async def get_cached_available_dates(venue_id: int, version: int, start: str, end: str) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_available_dates_key(venue_id, version, start, end)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=bool(data))
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_available_dates(venue_id: int, version: int, start: str, end: str, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_available_dates_key(venue_id, version, start, end)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_venue_cache(venue_id: int) -> None:
    """
    Invalidate every cached availability window for one venue.
    Uses SCAN to find and delete all keys matching the venue prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"venues:{venue_id}:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", venue_id=venue_id, keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", venue_id=venue_id, error=str(e))


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
    except Exception as e:
        return {"status": "error", "error": str(e)}
