"""
Moderation domain — request orchestration for the admin back office.
"""
from __future__ import annotations

import logging
import uuid

from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import invalidate_post_aggregates
from app.exceptions import NotFoundError, OperationFailedError
from app.models.enums import ReportTargetType
from app.models.moderation import AdminNotification
from app.moderation import service as svc
from app.moderation.exceptions import (
    AdminNotificationNotFoundError,
    ContentDeletionFailedError,
    TargetNotFoundError,
)
from app.moderation.schemas import (
    AdminNotificationItem,
    AdminNotificationsResponse,
    HiddenContentItem,
    HiddenContentResponse,
)
from app.schemas import UserRef

logger = logging.getLogger(__name__)


def _to_notification(n: AdminNotification) -> AdminNotificationItem:
    return AdminNotificationItem(
        id=n.admin_notification_id,
        type=n.type,
        target_type=n.target_type,
        target_id=n.target_id,
        message=n.message,
        report_count=n.report_count,
        is_read=n.is_read,
        is_resolved=n.is_resolved,
        resolved_at=n.resolved_at,
        created_at=n.created_at,
    )


async def list_hidden(
    db: AsyncSession, target_type: ReportTargetType | None, limit: int, offset: int
) -> HiddenContentResponse:
    items = await svc.get_hidden_content(db, target_type, limit=limit, offset=offset)
    return HiddenContentResponse(
        items=[
            HiddenContentItem(
                target_type=i.target_type,
                target_id=i.target_id,
                summary=i.summary,
                owner=UserRef.model_validate(i.owner),
                report_count=i.report_count,
                hidden_at=i.hidden_at,
            )
            for i in items
        ]
    )


async def restore(
    db: AsyncSession, admin_id: uuid.UUID, target_type: ReportTargetType, target_id: uuid.UUID
) -> dict:
    try:
        await svc.restore_content(
            db, admin_id=admin_id, target_type=target_type, target_id=target_id
        )
    except TargetNotFoundError:
        raise NotFoundError("Content")
    except SQLAlchemyError:
        logger.exception("Restore of %s %s failed", target_type.value, target_id)
        raise OperationFailedError("Failed to restore the content.")
    return {"success": True}


async def delete_hidden(
    db: AsyncSession,
    redis: Redis | None,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> dict:
    try:
        await svc.delete_hidden_content(
            db, admin_id=admin_id, target_type=target_type, target_id=target_id
        )
    except TargetNotFoundError:
        raise NotFoundError("Content")
    except ContentDeletionFailedError:
        raise OperationFailedError("Failed to delete the content.")
    if target_type == ReportTargetType.POST:
        await invalidate_post_aggregates(redis)
    return {"success": True}


async def list_notifications(
    db: AsyncSession, unread_only: bool, limit: int
) -> AdminNotificationsResponse:
    items, unread = await svc.list_admin_notifications(db, unread_only=unread_only, limit=limit)
    return AdminNotificationsResponse(
        items=[_to_notification(n) for n in items], unread_count=unread
    )


async def mark_notification_read(db: AsyncSession, notification_id: uuid.UUID) -> dict:
    try:
        await svc.mark_admin_notification_read(db, notification_id)
    except AdminNotificationNotFoundError:
        raise NotFoundError("Admin notification")
    except SQLAlchemyError:
        logger.exception("Failed to mark admin notification %s read", notification_id)
        raise OperationFailedError("Failed to update the notification.")
    return {"success": True}


async def mark_all_notifications_read(db: AsyncSession) -> dict:
    try:
        await svc.mark_all_admin_notifications_read(db)
    except SQLAlchemyError:
        logger.exception("Failed to mark admin notifications read")
        raise OperationFailedError("Failed to update notifications.")
    return {"success": True}
