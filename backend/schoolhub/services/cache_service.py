"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - Event listing responses (paginated, JSON-serialized)
  - Event counts (present / upcoming / total)
  - Key pattern: "events:list:page={page}&limit={limit}&status={status}"
    and "events:counts"

Invalidation strategy:
  - On event create / update / delete: delete every "events:*" key
  - TTL-based expiry as safety net (5 minutes)

Why NOT cache single events or availability:
  - Availability must reflect the live application count
  - Single-event reads are cheap primary-key lookups

Cache failures are never fatal: a broken Redis means a cache miss.
"""

import json
from typing import Optional

from schoolhub.core.config import get_settings
from schoolhub.core.logging import get_logger
from schoolhub.core.metrics import record_cache_operation
from schoolhub.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

EVENT_KEY_PREFIX = "events:"
EVENT_COUNTS_KEY = "events:counts"


def make_event_list_key(page: int, limit: int, status: str) -> str:
    return f"events:list:page={page}&limit={limit}&status={status}"


async def get_cached(key: str) -> Optional[dict]:
    """Retrieve a cached response body."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached(key: str, data: dict) -> None:
    """Cache a response body with the configured TTL."""
    client = await get_redis()
    if not client:
        return

    ttl = get_settings().REDIS_CACHE_TTL
    try:
        await client.setex(key, ttl, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=ttl)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """
    Invalidate all cached event listings and counts.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_KEY_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


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
