"""
Social graph domain — request orchestration.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, ForbiddenError, NotFoundError, OperationFailedError
from app.pagination import CursorPage, build_cursor_page
from app.schemas import UserRef
from app.social_graph import service as svc
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
from app.social_graph.schemas import (
    FollowListItem,
    FollowToggleResponse,
    RelationshipResponse,
    SocialRelationItem,
)

logger = logging.getLogger(__name__)

# Domain exception → HTTP exception factory
_ERRORS = {
    UserNotFoundError: lambda: NotFoundError("User"),
    HiddenByBlockError: lambda: NotFoundError("User"),
    CannotFollowSelfError: lambda: ForbiddenError("You cannot follow yourself."),
    CannotBlockSelfError: lambda: ForbiddenError("You cannot block yourself."),
    CannotMuteSelfError: lambda: ForbiddenError("You cannot mute yourself."),
    BlockedRelationshipError: lambda: ForbiddenError("You cannot follow this user."),
    AlreadyBlockedError: lambda: ConflictError("User is already blocked."),
    AlreadyMutedError: lambda: ConflictError("User is already muted."),
    NotFollowingError: lambda: NotFoundError("Follow"),
    NotBlockedError: lambda: NotFoundError("Block"),
    NotMutedError: lambda: NotFoundError("Mute"),
}


async def _run(action: str, coro):
    try:
        return await coro
    except tuple(_ERRORS) as exc:
        raise _ERRORS[type(exc)]() from exc
    except SQLAlchemyError:
        logger.exception("Social graph %s failed", action)
        raise OperationFailedError()


async def follow_user(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> FollowToggleResponse:
    is_following = await _run("follow", svc.toggle_follow(session, follower_id, following_id))
    return FollowToggleResponse(is_following=is_following)


async def unfollow_user(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> dict:
    await _run("unfollow", svc.unfollow(session, follower_id, following_id))
    return {"success": True}


async def block_user(session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> dict:
    await _run("block", svc.block(session, blocker_id, blocked_id))
    return {"success": True}


async def unblock_user(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> dict:
    await _run("unblock", svc.unblock(session, blocker_id, blocked_id))
    return {"success": True}


async def mute_user(session: AsyncSession, muter_id: uuid.UUID, muted_id: uuid.UUID) -> dict:
    await _run("mute", svc.mute(session, muter_id, muted_id))
    return {"success": True}


async def unmute_user(session: AsyncSession, muter_id: uuid.UUID, muted_id: uuid.UUID) -> dict:
    await _run("unmute", svc.unmute(session, muter_id, muted_id))
    return {"success": True}


async def relationship(
    session: AsyncSession, viewer_id: uuid.UUID, target_id: uuid.UUID
) -> RelationshipResponse:
    rel = await _run("relationship", svc.get_relationship(session, viewer_id, target_id))
    return RelationshipResponse.model_validate(rel)


async def list_blocked(
    session: AsyncSession, user_id: uuid.UUID, cursor: uuid.UUID | None, limit: int
) -> CursorPage[SocialRelationItem]:
    rows = await svc.get_blocked(session, user_id, cursor=cursor, limit=limit)
    return build_cursor_page(
        rows,
        limit,
        lambda row: row[0].block_id,
        lambda row: SocialRelationItem(
            id=row[0].block_id, user=UserRef.model_validate(row[1]), created_at=row[0].created_at
        ),
    )


async def list_muted(
    session: AsyncSession, user_id: uuid.UUID, cursor: uuid.UUID | None, limit: int
) -> CursorPage[SocialRelationItem]:
    rows = await svc.get_muted(session, user_id, cursor=cursor, limit=limit)
    return build_cursor_page(
        rows,
        limit,
        lambda row: row[0].mute_id,
        lambda row: SocialRelationItem(
            id=row[0].mute_id, user=UserRef.model_validate(row[1]), created_at=row[0].created_at
        ),
    )


async def _follow_page(session, viewer_id, rows, limit) -> CursorPage[FollowListItem]:
    followed = await svc.batch_followed_by(session, viewer_id, [u.id for _, u in rows])
    return build_cursor_page(
        rows,
        limit,
        lambda row: row[0].follow_id,
        lambda row: FollowListItem(
            id=row[0].follow_id,
            user=UserRef.model_validate(row[1]),
            created_at=row[0].created_at,
            is_followed_by_me=row[1].id in followed,
        ),
    )


async def list_following(
    session: AsyncSession,
    user_id: uuid.UUID,
    viewer_id: uuid.UUID,
    cursor: uuid.UUID | None,
    limit: int,
) -> CursorPage[FollowListItem]:
    """Another user's following; 404 if that user has blocked the viewer."""
    rows = await _run(
        "following",
        svc.get_following(session, user_id, viewer_id=viewer_id, cursor=cursor, limit=limit),
    )
    return await _follow_page(session, viewer_id, rows, limit)


async def list_followers(
    session: AsyncSession,
    user_id: uuid.UUID,
    viewer_id: uuid.UUID,
    cursor: uuid.UUID | None,
    limit: int,
) -> CursorPage[FollowListItem]:
    rows = await _run(
        "followers",
        svc.get_followers(session, user_id, viewer_id=viewer_id, cursor=cursor, limit=limit),
    )
    return await _follow_page(session, viewer_id, rows, limit)
