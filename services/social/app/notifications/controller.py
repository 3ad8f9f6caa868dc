from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, OperationFailedError
from app.models.notification import Notification
from app.notifications import service
from app.notifications.exceptions import NotificationNotFoundError
from app.notifications.schemas import ActorSummary, NotificationSummary, UnreadCountResponse
from app.pagination import CursorPage, build_cursor_page

logger = logging.getLogger(__name__)


def _to_summary(n: Notification) -> NotificationSummary:
    return NotificationSummary(
        id=n.notification_id,
        type=n.type,
        actor=ActorSummary.model_validate(n.actor),
        post_id=n.post_id,
        comment_id=n.comment_id,
        created_at=n.created_at,
        is_read=n.is_read,
    )


async def get_notifications(
    user_id: UUID, db: AsyncSession, limit: int, cursor: UUID | None
) -> CursorPage[NotificationSummary]:
    items = await service.list_notifications(user_id=user_id, db=db, limit=limit, cursor=cursor)
    return build_cursor_page(items, limit, lambda n: n.notification_id, _to_summary)


async def get_unread_count(user_id: UUID, db: AsyncSession) -> UnreadCountResponse:
    return UnreadCountResponse(count=await service.get_unread_count(user_id=user_id, db=db))


async def mark_read(user_id: UUID, notification_id: UUID, db: AsyncSession) -> dict:
    try:
        await service.mark_read(user_id=user_id, notification_id=notification_id, db=db)
    except NotificationNotFoundError:
        raise NotFoundError("Notification")
    except SQLAlchemyError:
        logger.exception("Failed to mark notification %s read", notification_id)
        raise OperationFailedError("Failed to update the notification.")
    return {"success": True}


async def mark_all_read(user_id: UUID, db: AsyncSession) -> dict:
    try:
        await service.mark_all_read(user_id=user_id, db=db)
    except SQLAlchemyError:
        logger.exception("Failed to mark notifications read for %s", user_id)
        raise OperationFailedError("Failed to update notifications.")
    return {"success": True}
