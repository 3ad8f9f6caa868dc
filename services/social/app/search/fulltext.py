"""Keyword matching strategies for post and user search.

Each function returns candidate ids in result order; callers hydrate them.

  like  ILIKE '%q%' on any backend, newest first
  bigm  LIKE '%q%' served by a pg_bigm GIN index, newest first
  trgm  pg_trgm similarity ranking with an ILIKE safety net, most similar first

If an indexed query fails (typically the extension is not installed) the
error is logged and the LIKE strategy answers instead.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.models.post import Post, PostGenre
from app.models.user import User
from app.pagination import apply_id_cursor
from app.search.constants import SearchMode
from app.visibility.filters import apply_exclusion, not_suspended_users, visible_posts

logger = logging.getLogger(__name__)


def _apply_relevance_cursor(
    stmt: sa.Select,
    score: sa.ColumnElement,
    created_column: InstrumentedAttribute,
    id_column: InstrumentedAttribute,
    cursor: UUID | None,
    limit: int,
) -> sa.Select:
    """Keyset pagination over (score DESC, created_at DESC, id DESC)."""
    stmt = stmt.order_by(score.desc(), created_column.desc(), id_column.desc()).limit(limit)
    if cursor is None:
        return stmt
    anchor_score = (
        sa.select(score).where(id_column == cursor).correlate(None).scalar_subquery()
    )
    anchor_created = (
        sa.select(created_column).where(id_column == cursor).correlate(None).scalar_subquery()
    )
    return stmt.where(
        sa.tuple_(score, created_column, id_column)
        < sa.tuple_(anchor_score, anchor_created, cursor)
    )


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


def _post_base(excluded: Collection[UUID], genre_ids: Collection[UUID]) -> sa.Select:
    stmt = sa.select(Post.post_id).where(visible_posts())
    if genre_ids:
        stmt = stmt.where(
            sa.exists().where(
                PostGenre.post_id == Post.post_id,
                PostGenre.genre_id.in_(list(genre_ids)),
            )
        )
    return apply_exclusion(stmt, Post.user_id, excluded)


def _like_posts(q, excluded, genre_ids, cursor, limit) -> sa.Select:
    stmt = _post_base(excluded, genre_ids)
    if q:
        stmt = stmt.where(Post.content.icontains(q, autoescape=True))
    return apply_id_cursor(stmt, Post.post_id, Post.created_at, cursor, limit)


def _bigm_posts(q, excluded, genre_ids, cursor, limit) -> sa.Select:
    stmt = _post_base(excluded, genre_ids).where(Post.content.contains(q, autoescape=True))
    return apply_id_cursor(stmt, Post.post_id, Post.created_at, cursor, limit)


def _trgm_posts(q, excluded, genre_ids, cursor, limit) -> sa.Select:
    stmt = _post_base(excluded, genre_ids).where(
        sa.or_(Post.content.op("%")(q), Post.content.icontains(q, autoescape=True))
    )
    score = sa.func.similarity(Post.content, q)
    return _apply_relevance_cursor(stmt, score, Post.created_at, Post.post_id, cursor, limit)


_POST_STRATEGIES = {
    SearchMode.BIGM: _bigm_posts,
    SearchMode.TRGM: _trgm_posts,
}


async def search_post_ids(
    db: AsyncSession,
    mode: SearchMode,
    q: str | None,
    *,
    excluded: Collection[UUID] = (),
    genre_ids: Collection[UUID] = (),
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[UUID]:
    q = (q or "").strip()
    strategy = _POST_STRATEGIES.get(mode)
    if strategy is not None and q:
        try:
            async with db.begin_nested():
                result = await db.execute(strategy(q, excluded, genre_ids, cursor, limit))
                return list(result.scalars().all())
        except DBAPIError:
            logger.warning("%s post search failed; falling back to LIKE", mode.value, exc_info=True)
    result = await db.execute(_like_posts(q, excluded, genre_ids, cursor, limit))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _user_base(excluded: Collection[UUID]) -> sa.Select:
    stmt = sa.select(User.id).where(not_suspended_users())
    return apply_exclusion(stmt, User.id, excluded)


def _like_users(q, excluded, cursor, limit) -> sa.Select:
    stmt = _user_base(excluded).where(
        sa.or_(
            User.nickname.icontains(q, autoescape=True),
            User.bio.icontains(q, autoescape=True),
        )
    )
    return apply_id_cursor(stmt, User.id, User.created_at, cursor, limit)


def _bigm_users(q, excluded, cursor, limit) -> sa.Select:
    stmt = _user_base(excluded).where(
        sa.or_(
            User.nickname.contains(q, autoescape=True),
            User.bio.contains(q, autoescape=True),
        )
    )
    return apply_id_cursor(stmt, User.id, User.created_at, cursor, limit)


def _trgm_users(q, excluded, cursor, limit) -> sa.Select:
    stmt = _user_base(excluded).where(
        sa.or_(
            User.nickname.op("%")(q),
            User.bio.op("%")(q),
            User.nickname.icontains(q, autoescape=True),
            User.bio.icontains(q, autoescape=True),
        )
    )
    score = sa.func.greatest(
        sa.func.similarity(User.nickname, q),
        sa.func.similarity(sa.func.coalesce(User.bio, ""), q),
    )
    return _apply_relevance_cursor(stmt, score, User.created_at, User.id, cursor, limit)


_USER_STRATEGIES = {
    SearchMode.BIGM: _bigm_users,
    SearchMode.TRGM: _trgm_users,
}


async def search_user_ids(
    db: AsyncSession,
    mode: SearchMode,
    q: str,
    *,
    excluded: Collection[UUID] = (),
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[UUID]:
    q = q.strip()
    if not q:
        return []
    strategy = _USER_STRATEGIES.get(mode)
    if strategy is not None:
        try:
            async with db.begin_nested():
                result = await db.execute(strategy(q, excluded, cursor, limit))
                return list(result.scalars().all())
        except DBAPIError:
            logger.warning("%s user search failed; falling back to LIKE", mode.value, exc_info=True)
    result = await db.execute(_like_users(q, excluded, cursor, limit))
    return list(result.scalars().all())


async def is_extension_installed(db: AsyncSession, name: str) -> bool:
    """Whether a PostgreSQL extension is installed; False on other backends."""
    if db.get_bind().dialect.name != "postgresql":
        return False
    result = await db.execute(
        sa.text("SELECT EXISTS (SELECT 1 FROM pg_extension WHERE extname = :name)"),
        {"name": name},
    )
    return bool(result.scalar())
