"""Search service — pure business logic, no FastAPI imports.

Post and user search delegate keyword matching to app.search.fulltext, which
returns ranked ids; this module applies the viewer's exclusion set up front
and hydrates the ids back into ORM rows in rank order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import (
    GENRE_CATALOG_KEY,
    GENRE_CATALOG_TTL_S,
    POPULAR_TAGS_KEY,
    POPULAR_TAGS_TTL_S,
)
from app.models.post import Genre, Hashtag, Post, PostHashtag
from app.models.user import User
from app.pagination import apply_id_cursor
from app.posts.hashtags import normalize_tag
from app.posts.service import get_posts_by_ids, post_load_options
from app.search import fulltext
from app.search.constants import GENRE_CATEGORY_ORDER, SEARCH_EXTENSIONS, SearchMode
from app.search.exceptions import HashtagNotFoundError
from app.visibility.filters import apply_exclusion, order_by_ids, visible_posts
from app.visibility.service import get_excluded_user_ids
from shared.database.redis_client import cache_get_json, cache_set_json

logger = logging.getLogger(__name__)

_POPULAR_TAGS_WINDOW_DAYS = 7
_RANKING_DEPTH = 20


async def _post_exclusions(viewer_id: UUID | None, db: AsyncSession) -> set[UUID]:
    if viewer_id is None:
        return set()
    return await get_excluded_user_ids(
        db, viewer_id, blocked=True, blocked_by=True, muted=True
    )


# ---------------------------------------------------------------------------
# Post / user search
# ---------------------------------------------------------------------------


async def search_posts(
    q: str | None,
    db: AsyncSession,
    mode: SearchMode,
    viewer_id: UUID | None = None,
    genre_ids: list[UUID] | None = None,
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[Post]:
    excluded = await _post_exclusions(viewer_id, db)
    post_ids = await fulltext.search_post_ids(
        db,
        mode,
        q,
        excluded=excluded,
        genre_ids=genre_ids or (),
        cursor=cursor,
        limit=limit,
    )
    posts = await get_posts_by_ids(post_ids, db)
    return order_by_ids(posts, post_ids, key=lambda p: p.post_id)


async def search_users(
    q: str,
    db: AsyncSession,
    mode: SearchMode,
    viewer_id: UUID | None = None,
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[User]:
    """Nickname / bio search; never returns the viewer, suspended or blocked accounts."""
    excluded: set[UUID] = set()
    if viewer_id is not None:
        excluded = await get_excluded_user_ids(db, viewer_id, blocked=True, blocked_by=True)
        excluded.add(viewer_id)
    user_ids = await fulltext.search_user_ids(
        db, mode, q, excluded=excluded, cursor=cursor, limit=limit
    )
    if not user_ids:
        return []
    users = (await db.execute(select(User).where(User.id.in_(user_ids)))).scalars().all()
    return order_by_ids(users, user_ids, key=lambda u: u.id)


# ---------------------------------------------------------------------------
# Hashtags
# ---------------------------------------------------------------------------


async def search_by_tag(
    tag: str,
    db: AsyncSession,
    viewer_id: UUID | None = None,
    cursor: UUID | None = None,
    limit: int = 20,
) -> tuple[Hashtag, list[Post]]:
    name = normalize_tag(tag)
    hashtag = (
        await db.execute(select(Hashtag).where(Hashtag.name == name))
    ).scalar_one_or_none()
    if hashtag is None:
        raise HashtagNotFoundError()

    excluded = await _post_exclusions(viewer_id, db)
    stmt = (
        select(Post)
        .options(*post_load_options())
        .join(PostHashtag, PostHashtag.post_id == Post.post_id)
        .where(PostHashtag.hashtag_id == hashtag.hashtag_id, visible_posts())
    )
    stmt = apply_exclusion(stmt, Post.user_id, excluded)
    stmt = apply_id_cursor(stmt, Post.post_id, Post.created_at, cursor, limit)
    posts = list((await db.execute(stmt)).scalars().all())
    return hashtag, posts


async def get_popular_tags(
    db: AsyncSession,
    redis: Redis | None = None,
    limit: int = 10,
) -> list[dict]:
    """Hashtags used by the most posts in the last 7 days, Redis-cached."""
    cached = await cache_get_json(redis, POPULAR_TAGS_KEY)
    if cached is not None:
        return cached[:limit]

    cutoff = datetime.now(timezone.utc) - timedelta(days=_POPULAR_TAGS_WINDOW_DAYS)
    post_count = func.count(PostHashtag.post_id).label("post_count")
    stmt = (
        select(Hashtag.name, post_count)
        .join(PostHashtag, PostHashtag.hashtag_id == Hashtag.hashtag_id)
        .join(Post, Post.post_id == PostHashtag.post_id)
        .where(Post.created_at >= cutoff, visible_posts())
        .group_by(Hashtag.name)
        .order_by(post_count.desc(), Hashtag.name)
        .limit(max(limit, _RANKING_DEPTH))
    )
    rows = (await db.execute(stmt)).all()
    items = [{"tag": row.name, "count": row.post_count} for row in rows]
    await cache_set_json(redis, POPULAR_TAGS_KEY, items, POPULAR_TAGS_TTL_S)
    return items[:limit]


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------


async def get_all_genres(db: AsyncSession, redis: Redis | None = None) -> dict[str, list[dict]]:
    """Genre catalog grouped by category in display order, Redis-cached.

    Categories outside GENRE_CATEGORY_ORDER are omitted.
    """
    cached = await cache_get_json(redis, GENRE_CATALOG_KEY)
    if cached is not None:
        return cached

    genres = (
        await db.execute(select(Genre).order_by(Genre.sort_order, Genre.name))
    ).scalars().all()
    by_category: dict[str, list[dict]] = defaultdict(list)
    for genre in genres:
        by_category[genre.category].append(
            {"genre_id": str(genre.genre_id), "name": genre.name, "category": genre.category}
        )
    grouped = {
        category: by_category[category]
        for category in GENRE_CATEGORY_ORDER
        if category in by_category
    }
    await cache_set_json(redis, GENRE_CATALOG_KEY, grouped, GENRE_CATALOG_TTL_S)
    return grouped


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


async def get_search_status(db: AsyncSession, mode: SearchMode) -> dict:
    """Active mode plus which search extensions the database has installed."""
    extensions = {
        name: await fulltext.is_extension_installed(db, name)
        for name in SEARCH_EXTENSIONS.values()
    }
    required = SEARCH_EXTENSIONS.get(mode)
    return {
        "mode": mode,
        "extensions": extensions,
        "ready": required is None or extensions[required],
    }
