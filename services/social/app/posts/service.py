"""
Posts domain — creation and deletion with genre and hashtag bookkeeping.

Hashtag.count tracks how many posts link to a tag; it is incremented on
attach and decremented on detach, and tags that reach zero are removed.
"""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.base import ExecutableOption

from app.models.comment import Comment
from app.models.post import Genre, Hashtag, Post, PostGenre, PostHashtag
from app.models.user import User
from app.pagination import apply_id_cursor
from app.posts.exceptions import (
    GenreNotFoundError,
    NotPostOwnerError,
    PostNotFoundError,
    TooManyGenresError,
)
from app.posts.hashtags import extract_hashtags
from app.visibility.filters import apply_exclusion, visible_comments, visible_posts
from app.visibility.service import get_blocked_user_ids

logger = logging.getLogger(__name__)

MAX_GENRES_PER_POST = 3


def post_load_options() -> list[ExecutableOption]:
    """Eager-load what PostSummary renders."""
    return [selectinload(Post.author), selectinload(Post.genres)]


async def get_posts_by_ids(post_ids: list[UUID], db: AsyncSession) -> list[Post]:
    if not post_ids:
        return []
    result = await db.execute(
        select(Post).options(*post_load_options()).where(Post.post_id.in_(post_ids))
    )
    return list(result.scalars().all())


async def attach_hashtags(post_id: UUID, content: str | None, db: AsyncSession) -> list[str]:
    names = extract_hashtags(content)
    for name in names:
        hashtag = (
            await db.execute(select(Hashtag).where(Hashtag.name == name))
        ).scalar_one_or_none()
        if hashtag is None:
            hashtag = Hashtag(name=name, count=1)
            db.add(hashtag)
            await db.flush()
        else:
            await db.execute(
                update(Hashtag)
                .where(Hashtag.hashtag_id == hashtag.hashtag_id)
                .values(count=Hashtag.count + 1)
            )
        db.add(PostHashtag(post_id=post_id, hashtag_id=hashtag.hashtag_id))
    await db.flush()
    return names


async def detach_hashtags(post_id: UUID, db: AsyncSession) -> None:
    hashtag_ids = list(
        (
            await db.execute(
                select(PostHashtag.hashtag_id).where(PostHashtag.post_id == post_id)
            )
        ).scalars()
    )
    if not hashtag_ids:
        return
    await db.execute(delete(PostHashtag).where(PostHashtag.post_id == post_id))
    await db.execute(
        update(Hashtag)
        .where(Hashtag.hashtag_id.in_(hashtag_ids))
        .values(count=Hashtag.count - 1)
    )
    await db.execute(delete(Hashtag).where(Hashtag.count <= 0))


async def create_post(
    user_id: UUID,
    content: str,
    db: AsyncSession,
    genre_ids: list[UUID] | None = None,
) -> Post:
    genre_ids = list(dict.fromkeys(genre_ids or []))
    if len(genre_ids) > MAX_GENRES_PER_POST:
        raise TooManyGenresError()
    if genre_ids:
        found = (
            await db.execute(
                select(func.count(Genre.genre_id)).where(Genre.genre_id.in_(genre_ids))
            )
        ).scalar_one()
        if found != len(genre_ids):
            raise GenreNotFoundError()

    post = Post(user_id=user_id, content=content)
    db.add(post)
    await db.flush()
    for genre_id in genre_ids:
        db.add(PostGenre(post_id=post.post_id, genre_id=genre_id))
    tags = await attach_hashtags(post.post_id, content, db)
    logger.info("Post %s created by %s (%d hashtags)", post.post_id, user_id, len(tags))

    result = await db.execute(
        select(Post)
        .options(*post_load_options())
        .where(Post.post_id == post.post_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def delete_post(post_id: UUID, db: AsyncSession) -> None:
    """Delete a post and release its hashtags. No ownership check."""
    exists = (
        await db.execute(select(Post.post_id).where(Post.post_id == post_id))
    ).scalar_one_or_none()
    if exists is None:
        raise PostNotFoundError()
    await detach_hashtags(post_id, db)
    await db.execute(delete(PostGenre).where(PostGenre.post_id == post_id))
    await db.execute(delete(Post).where(Post.post_id == post_id))


async def delete_own_post(user_id: UUID, post_id: UUID, db: AsyncSession) -> None:
    post = await db.get(Post, post_id)
    if post is None:
        raise PostNotFoundError()
    if post.user_id != user_id:
        raise NotPostOwnerError()
    await delete_post(post_id, db)


async def _require_visible_post(post_id: UUID, db: AsyncSession) -> None:
    found = (
        await db.execute(select(Post.post_id).where(Post.post_id == post_id, visible_posts()))
    ).scalar_one_or_none()
    if found is None:
        raise PostNotFoundError()


async def get_comments(
    post_id: UUID,
    db: AsyncSession,
    viewer_id: UUID | None = None,
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[tuple[Comment, User]]:
    """Visible comments on a visible post with their authors, newest first.

    Hidden comments never appear; signed-in viewers also lose comments from
    accounts with a block in either direction.
    """
    await _require_visible_post(post_id, db)
    excluded = await get_blocked_user_ids(db, viewer_id) if viewer_id is not None else set()
    stmt = (
        select(Comment, User)
        .join(User, User.id == Comment.user_id)
        .where(Comment.post_id == post_id, visible_comments())
    )
    stmt = apply_exclusion(stmt, Comment.user_id, excluded)
    stmt = apply_id_cursor(stmt, Comment.comment_id, Comment.created_at, cursor, limit)
    return list((await db.execute(stmt)).tuples().all())


async def get_comment_count(post_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Comment)
        .where(Comment.post_id == post_id, visible_comments())
    )
    return result.scalar_one()
