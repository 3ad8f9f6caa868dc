"""Redis cache keys for read-heavy aggregates.

Key schema
----------
feed:trending-genres      JSON list   TTL 5 min   genre ranking, last 48 h
search:popular-tags       JSON list   TTL 5 min   hashtag ranking, last 7 days
search:genres             JSON dict   TTL 1 h     genre catalog grouped by category

Values are computed from the database on a miss; Redis being down only
costs the cache.
"""

from redis.asyncio import Redis

from shared.database.redis_client import cache_delete

TRENDING_GENRES_KEY = "feed:trending-genres"
TRENDING_GENRES_TTL_S: int = 300      # 5 minutes

POPULAR_TAGS_KEY = "search:popular-tags"
POPULAR_TAGS_TTL_S: int = 300         # 5 minutes

GENRE_CATALOG_KEY = "search:genres"
GENRE_CATALOG_TTL_S: int = 3600       # 1 hour


async def invalidate_post_aggregates(redis: Redis | None) -> None:
    """Drop rankings that a new or deleted post changes."""
    await cache_delete(redis, TRENDING_GENRES_KEY, POPULAR_TAGS_KEY)
