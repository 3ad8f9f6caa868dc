"""
Social graph domain — pure business logic (zero FastAPI imports).

State rules:
  follow:   toggles; cannot follow self; refused while a block exists either way
  block:    cannot block self; removes follow edges in both directions
  mute:     cannot mute self; independent of follow/block
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.models.enums import NotificationType
from app.models.social import Block, Follow, Mute
from app.models.user import User
from app.notifications.service import create_notification, delete_notification
from app.pagination import apply_id_cursor
from app.social_graph.exceptions import (
    AlreadyBlockedError,
    AlreadyMutedError,
    BlockedRelationshipError,
    CannotBlockSelfError,
    CannotFollowSelfError,
    CannotMuteSelfError,
    HiddenByBlockError,
    NotBlockedError,
    NotFollowingError,
    NotMutedError,
    UserNotFoundError,
)
from app.visibility.filters import apply_exclusion, not_suspended_users
from app.visibility.service import get_blocked_user_ids, is_block_between

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relationship:
    is_following: bool
    is_followed_by: bool
    is_blocking: bool
    is_blocked_by: bool
    is_muting: bool


# ── Internal helpers ───────────────────────────────────────────────────────────

async def _exists(session: AsyncSession, *criteria: sa.ColumnElement[bool]) -> bool:
    result = await session.execute(sa.select(sa.exists().where(*criteria)))
    return bool(result.scalar())


async def _follow_exists(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    return await _exists(
        session, Follow.follower_id == follower_id, Follow.following_id == following_id
    )


async def _block_exists(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> bool:
    return await _exists(session, Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)


async def _mute_exists(session: AsyncSession, muter_id: uuid.UUID, muted_id: uuid.UUID) -> bool:
    return await _exists(session, Mute.muter_id == muter_id, Mute.muted_id == muted_id)


async def _require_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


# ── Follow ─────────────────────────────────────────────────────────────────────

async def toggle_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> bool:
    """Follow *following_id*, or unfollow if already following.

    Returns the resulting follow state.
    """
    if follower_id == following_id:
        raise CannotFollowSelfError()
    await _require_user(session, following_id)

    if await _follow_exists(session, follower_id, following_id):
        await unfollow(session, follower_id, following_id)
        return False

    if await is_block_between(session, follower_id, following_id):
        raise BlockedRelationshipError()
    session.add(Follow(follower_id=follower_id, following_id=following_id))
    await session.flush()
    await create_notification(
        user_id=following_id,
        actor_id=follower_id,
        type_=NotificationType.FOLLOW,
        db=session,
    )
    return True


async def unfollow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> None:
    result = await session.execute(
        sa.delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    if result.rowcount == 0:
        raise NotFollowingError()
    await delete_notification(
        user_id=following_id,
        actor_id=follower_id,
        type_=NotificationType.FOLLOW,
        db=session,
    )


# ── Block ──────────────────────────────────────────────────────────────────────

async def block(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> Block:
    if blocker_id == blocked_id:
        raise CannotBlockSelfError()
    await _require_user(session, blocked_id)
    if await _block_exists(session, blocker_id, blocked_id):
        raise AlreadyBlockedError()
    edge = Block(blocker_id=blocker_id, blocked_id=blocked_id)
    session.add(edge)
    for follower_id, following_id in ((blocker_id, blocked_id), (blocked_id, blocker_id)):
        removed = await session.execute(
            sa.delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        if removed.rowcount:
            await delete_notification(
                user_id=following_id,
                actor_id=follower_id,
                type_=NotificationType.FOLLOW,
                db=session,
            )
    await session.flush()
    logger.info("User %s blocked %s", blocker_id, blocked_id)
    return edge


async def unblock(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> None:
    result = await session.execute(
        sa.delete(Block).where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        )
    )
    if result.rowcount == 0:
        raise NotBlockedError()


# ── Mute ───────────────────────────────────────────────────────────────────────

async def mute(
    session: AsyncSession,
    muter_id: uuid.UUID,
    muted_id: uuid.UUID,
) -> Mute:
    if muter_id == muted_id:
        raise CannotMuteSelfError()
    await _require_user(session, muted_id)
    if await _mute_exists(session, muter_id, muted_id):
        raise AlreadyMutedError()
    edge = Mute(muter_id=muter_id, muted_id=muted_id)
    session.add(edge)
    await session.flush()
    return edge


async def unmute(
    session: AsyncSession,
    muter_id: uuid.UUID,
    muted_id: uuid.UUID,
) -> None:
    result = await session.execute(
        sa.delete(Mute).where(
            Mute.muter_id == muter_id,
            Mute.muted_id == muted_id,
        )
    )
    if result.rowcount == 0:
        raise NotMutedError()


# ── Status ─────────────────────────────────────────────────────────────────────

async def get_relationship(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    target_id: uuid.UUID,
) -> Relationship:
    await _require_user(session, target_id)
    return Relationship(
        is_following=await _follow_exists(session, viewer_id, target_id),
        is_followed_by=await _follow_exists(session, target_id, viewer_id),
        is_blocking=await _block_exists(session, viewer_id, target_id),
        is_blocked_by=await _block_exists(session, target_id, viewer_id),
        is_muting=await _mute_exists(session, viewer_id, target_id),
    )


# ── Blocked / Muted lists ──────────────────────────────────────────────────────

async def get_blocked(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    cursor: uuid.UUID | None,
    limit: int,
) -> list[tuple[Block, User]]:
    stmt = (
        sa.select(Block, User)
        .join(User, User.id == Block.blocked_id)
        .where(Block.blocker_id == user_id)
    )
    stmt = apply_id_cursor(stmt, Block.block_id, Block.created_at, cursor, limit)
    return list((await session.execute(stmt)).tuples().all())


async def get_muted(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    cursor: uuid.UUID | None,
    limit: int,
) -> list[tuple[Mute, User]]:
    stmt = (
        sa.select(Mute, User)
        .join(User, User.id == Mute.muted_id)
        .where(Mute.muter_id == user_id)
    )
    stmt = apply_id_cursor(stmt, Mute.mute_id, Mute.created_at, cursor, limit)
    return list((await session.execute(stmt)).tuples().all())


# ── Following / Followers lists ────────────────────────────────────────────────

async def _follow_list(
    session: AsyncSession,
    user_id: uuid.UUID,
    viewer_id: uuid.UUID,
    *,
    edge_column: InstrumentedAttribute,
    user_column: InstrumentedAttribute,
    cursor: uuid.UUID | None,
    limit: int,
) -> list[tuple[Follow, User]]:
    if await _block_exists(session, blocker_id=user_id, blocked_id=viewer_id):
        raise HiddenByBlockError()
    await _require_user(session, user_id)

    excluded = await get_blocked_user_ids(session, viewer_id)
    stmt = (
        sa.select(Follow, User)
        .join(User, User.id == user_column)
        .where(edge_column == user_id, not_suspended_users())
    )
    stmt = apply_exclusion(stmt, User.id, excluded)
    stmt = apply_id_cursor(stmt, Follow.follow_id, Follow.created_at, cursor, limit)
    return list((await session.execute(stmt)).tuples().all())


async def get_following(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    viewer_id: uuid.UUID,
    cursor: uuid.UUID | None,
    limit: int,
) -> list[tuple[Follow, User]]:
    """Accounts *user_id* follows; raises HiddenByBlockError if they blocked the viewer."""
    return await _follow_list(
        session,
        user_id,
        viewer_id,
        edge_column=Follow.follower_id,
        user_column=Follow.following_id,
        cursor=cursor,
        limit=limit,
    )


async def get_followers(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    viewer_id: uuid.UUID,
    cursor: uuid.UUID | None,
    limit: int,
) -> list[tuple[Follow, User]]:
    return await _follow_list(
        session,
        user_id,
        viewer_id,
        edge_column=Follow.following_id,
        user_column=Follow.follower_id,
        cursor=cursor,
        limit=limit,
    )


async def batch_followed_by(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    target_ids: list[uuid.UUID],
) -> set[uuid.UUID]:
    """Return the subset of target_ids that viewer_id follows."""
    if not target_ids:
        return set()
    result = await session.execute(
        sa.select(Follow.following_id).where(
            Follow.follower_id == viewer_id,
            Follow.following_id.in_(target_ids),
        )
    )
    return set(result.scalars().all())
