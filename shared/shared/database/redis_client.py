import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def get_redis_client(redis_url: str, **kwargs: Any) -> redis.Redis:
    return redis.from_url(redis_url, decode_responses=True, **kwargs)


async def cache_get_json(client: redis.Redis | None, key: str) -> Any | None:
    """Return the decoded JSON value under *key*, or None on miss.

    Redis is a best-effort cache: connection errors are logged and treated
    as a miss so callers fall through to the database.
    """
    if client is None:
        return None
    try:
        raw = await client.get(key)
    except RedisError:
        logger.warning("Redis GET failed for %s", key, exc_info=True)
        return None
    if raw is None:
        return None
    return json.loads(raw)


async def cache_set_json(
    client: redis.Redis | None, key: str, value: Any, ttl: int
) -> None:
    if client is None:
        return
    try:
        await client.setex(key, ttl, json.dumps(value, default=str))
    except RedisError:
        logger.warning("Redis SETEX failed for %s", key, exc_info=True)


async def cache_delete(client: redis.Redis | None, *keys: str) -> None:
    if client is None or not keys:
        return
    try:
        await client.delete(*keys)
    except RedisError:
        logger.warning("Redis DEL failed for %s", ", ".join(keys), exc_info=True)
