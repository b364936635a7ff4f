"""
Redis cache for the table listing.

CACHING STRATEGY
================

What we cache:
  - The GET /tables response (JSON list), key "tables:list"

Why:
  - The host stand polls the floor plan constantly; it changes only when a
    table is created, edited, removed, seated or finished

Invalidation:
  - Every table write and every seat/finish deletes the key
  - Short TTL as a safety net

Redis is advisory. When it is disabled or unreachable every call degrades to
a miss and the database answers.

Reservations are never cached: seat decisions need the live row.
"""

import json
from typing import Optional

import redis.asyncio as redis
from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

TABLE_LIST_KEY = "tables:list"

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


async def get_cached_tables() -> Optional[list]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(TABLE_LIST_KEY)
    except Exception as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=TABLE_LIST_KEY, error=str(e))
        return None

    if data:
        record_cache_operation("get", "hit")
        return json.loads(data)
    record_cache_operation("get", "miss")
    return None


async def set_cached_tables(tables: list) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(TABLE_LIST_KEY, settings.REDIS_CACHE_TTL, json.dumps(tables, default=str))
        record_cache_operation("set", "ok")
    except Exception as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=TABLE_LIST_KEY, error=str(e))


async def invalidate_table_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.delete(TABLE_LIST_KEY)
        record_cache_operation("invalidate", "ok")
        logger.debug("cache_invalidated", key=TABLE_LIST_KEY)
    except Exception as e:
        record_cache_operation("invalidate", "error")
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis status for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        # -2: not cached, -1: cached without expiry
        ttl = await client.ttl(TABLE_LIST_KEY)
        info = await client.info("stats")
        return {
            "status": "connected",
            "table_list_cached": ttl != -2,
            "table_list_ttl": max(ttl, 0),
            "keyspace_hits": info.get("keyspace_hits", 0),
            "keyspace_misses": info.get("keyspace_misses", 0),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
