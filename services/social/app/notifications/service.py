from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import NotificationType
from app.models.notification import Notification
from app.notifications.exceptions import NotificationNotFoundError
from app.pagination import apply_id_cursor
from app.visibility.filters import apply_exclusion
from app.visibility.service import get_excluded_user_ids, is_block_between

logger = logging.getLogger(__name__)


async def _hidden_actor_ids(user_id: UUID, db: AsyncSession) -> set[UUID]:
    return await get_excluded_user_ids(
        db, user_id, blocked=True, blocked_by=True, muted=True
    )


async def list_notifications(
    user_id: UUID,
    db: AsyncSession,
    limit: int,
    cursor: UUID | None = None,
) -> list[Notification]:
    """Newest-first notifications for *user_id*, minus muted and blocked actors."""
    excluded = await _hidden_actor_ids(user_id, db)
    stmt = (
        select(Notification)
        .options(selectinload(Notification.actor))
        .where(Notification.user_id == user_id)
    )
    stmt = apply_exclusion(stmt, Notification.actor_id, excluded)
    stmt = apply_id_cursor(
        stmt, Notification.notification_id, Notification.created_at, cursor, limit
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_unread_count(user_id: UUID, db: AsyncSession) -> int:
    excluded = await _hidden_actor_ids(user_id, db)
    stmt = select(func.count(Notification.notification_id)).where(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    )
    stmt = apply_exclusion(stmt, Notification.actor_id, excluded)
    return (await db.execute(stmt)).scalar_one()


async def mark_read(user_id: UUID, notification_id: UUID, db: AsyncSession) -> None:
    result = await db.execute(
        update(Notification)
        .where(
            Notification.user_id == user_id,
            Notification.notification_id == notification_id,
        )
        .values(is_read=True)
    )
    if result.rowcount == 0:
        raise NotificationNotFoundError()


async def mark_all_read(user_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount


def _same_event(
    user_id: UUID,
    actor_id: UUID,
    type_: NotificationType,
    post_id: UUID | None,
    comment_id: UUID | None,
) -> list:
    return [
        Notification.user_id == user_id,
        Notification.actor_id == actor_id,
        Notification.type == type_,
        Notification.post_id.is_(None) if post_id is None else Notification.post_id == post_id,
        Notification.comment_id.is_(None)
        if comment_id is None
        else Notification.comment_id == comment_id,
    ]


async def create_notification(
    user_id: UUID,
    actor_id: UUID,
    type_: NotificationType,
    db: AsyncSession,
    post_id: UUID | None = None,
    comment_id: UUID | None = None,
) -> Notification | None:
    """Record that *actor_id* did something to *user_id*.

    Returns None without writing when the actor is the recipient, when a
    block exists in either direction, or when the identical notification
    already exists.
    """
    if user_id == actor_id:
        return None
    if await is_block_between(db, user_id, actor_id):
        return None
    existing = await db.execute(
        select(Notification.notification_id)
        .where(*_same_event(user_id, actor_id, type_, post_id, comment_id))
        .limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        return None

    notification = Notification(
        user_id=user_id,
        actor_id=actor_id,
        type=type_,
        post_id=post_id,
        comment_id=comment_id,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Notification %s → %s (%s)", actor_id, user_id, type_.value)
    return notification


async def delete_notification(
    user_id: UUID,
    actor_id: UUID,
    type_: NotificationType,
    db: AsyncSession,
    post_id: UUID | None = None,
    comment_id: UUID | None = None,
) -> int:
    """Remove the notification an undone action produced (unfollow, unlike)."""
    result = await db.execute(
        delete(Notification).where(
            *_same_event(user_id, actor_id, type_, post_id, comment_id)
        )
    )
    return result.rowcount
