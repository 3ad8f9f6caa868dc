"""Feed business logic — timeline, recommended users, trending genres."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import TRENDING_GENRES_KEY, TRENDING_GENRES_TTL_S
from app.models.post import Genre, Post, PostGenre
from app.models.social import Follow
from app.models.user import User
from app.pagination import apply_id_cursor
from app.posts.service import post_load_options
from app.visibility.filters import apply_exclusion, not_suspended_users, visible_posts
from app.visibility.service import get_excluded_user_ids
from shared.database.redis_client import cache_get_json, cache_set_json

logger = logging.getLogger(__name__)

_TRENDING_WINDOW_HOURS = 48
# Rankings are cached at this depth and sliced per request
_RANKING_DEPTH = 20


async def get_timeline(
    user_id: UUID,
    db: AsyncSession,
    limit: int,
    cursor: UUID | None = None,
) -> list[Post]:
    """Posts by the accounts *user_id* follows plus their own, newest first.

    Authors the viewer blocked or muted are dropped even when still followed.
    """
    excluded = await get_excluded_user_ids(db, user_id, blocked=True, muted=True)
    following = select(Follow.following_id).where(Follow.follower_id == user_id)
    stmt = (
        select(Post)
        .options(*post_load_options())
        .where(
            visible_posts(),
            (Post.user_id == user_id) | Post.user_id.in_(following),
        )
    )
    stmt = apply_exclusion(stmt, Post.user_id, excluded)
    stmt = apply_id_cursor(stmt, Post.post_id, Post.created_at, cursor, limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_recommended_users(
    user_id: UUID,
    db: AsyncSession,
    limit: int = 5,
) -> list[tuple[User, int]]:
    """Public accounts the viewer does not follow, most-followed first.

    Returns (user, follower_count) pairs.
    """
    excluded = await get_excluded_user_ids(db, user_id, blocked=True, blocked_by=True)
    excluded.add(user_id)
    following = select(Follow.following_id).where(Follow.follower_id == user_id)
    follower_count = (
        select(func.count(Follow.follow_id))
        .where(Follow.following_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    stmt = (
        select(User, follower_count.label("follower_count"))
        .where(
            User.is_public.is_(True),
            not_suspended_users(),
            User.id.not_in(following),
        )
        .order_by(follower_count.desc(), User.created_at.desc())
        .limit(limit)
    )
    stmt = apply_exclusion(stmt, User.id, excluded)
    rows = (await db.execute(stmt)).all()
    return [(row[0], row[1]) for row in rows]


async def get_trending_genres(
    db: AsyncSession,
    redis: Redis | None = None,
    limit: int = 5,
) -> list[dict]:
    """Genres with the most posts in the last 48 hours, Redis-cached."""
    cached = await cache_get_json(redis, TRENDING_GENRES_KEY)
    if cached is not None:
        return cached[:limit]

    cutoff = datetime.now(timezone.utc) - timedelta(hours=_TRENDING_WINDOW_HOURS)
    post_count = func.count(PostGenre.post_id).label("post_count")
    stmt = (
        select(Genre.genre_id, Genre.name, Genre.category, post_count)
        .join(PostGenre, PostGenre.genre_id == Genre.genre_id)
        .join(Post, Post.post_id == PostGenre.post_id)
        .where(Post.created_at >= cutoff, visible_posts())
        .group_by(Genre.genre_id, Genre.name, Genre.category)
        .order_by(post_count.desc(), Genre.name)
        .limit(max(limit, _RANKING_DEPTH))
    )
    rows = (await db.execute(stmt)).all()
    items = [
        {
            "genre_id": str(row.genre_id),
            "name": row.name,
            "category": row.category,
            "post_count": row.post_count,
        }
        for row in rows
    ]
    await cache_set_json(redis, TRENDING_GENRES_KEY, items, TRENDING_GENRES_TTL_S)
    return items[:limit]
