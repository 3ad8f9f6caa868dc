"""
Moderation domain — moderator actions on hidden content and the admin inbox.

Every action that changes a target's state also resolves the open admin
notifications for that target and writes an AdminLog row in the same
transaction.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ReportStatus, ReportTargetType
from app.models.moderation import AdminLog, AdminNotification, Report
from app.models.user import User
from app.moderation.exceptions import (
    AdminNotificationNotFoundError,
    ContentDeletionFailedError,
    TargetNotFoundError,
)
from app.moderation.targets import CONTENT_TYPES, get_target

logger = logging.getLogger(__name__)

# Per-type slice when the hidden queue is requested without a type filter
_MIXED_QUEUE_PER_TYPE = 10


@dataclass(frozen=True)
class HiddenItem:
    target_type: ReportTargetType
    target_id: uuid.UUID
    summary: str
    owner: User
    report_count: int
    hidden_at: datetime | None


# ── Shared helpers ─────────────────────────────────────────────────────────────

async def write_admin_log(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    action: str,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    details: dict | None = None,
) -> AdminLog:
    entry = AdminLog(
        admin_id=admin_id,
        action=action,
        target_type=target_type.value,
        target_id=target_id,
        details=details,
    )
    db.add(entry)
    await db.flush()
    return entry


async def resolve_admin_notifications(
    db: AsyncSession, target_type: ReportTargetType, target_id: uuid.UUID
) -> int:
    result = await db.execute(
        sa.update(AdminNotification)
        .where(
            AdminNotification.target_type == target_type,
            AdminNotification.target_id == target_id,
            AdminNotification.is_resolved.is_(False),
        )
        .values(is_resolved=True, resolved_at=datetime.now(timezone.utc))
    )
    return result.rowcount


async def count_reports_by_target(
    db: AsyncSession, target_type: ReportTargetType, target_ids: list[uuid.UUID]
) -> dict[uuid.UUID, int]:
    if not target_ids:
        return {}
    result = await db.execute(
        sa.select(Report.target_id, sa.func.count(Report.report_id))
        .where(Report.target_type == target_type, Report.target_id.in_(target_ids))
        .group_by(Report.target_id)
    )
    return {target_id: count for target_id, count in result.tuples().all()}


async def delete_target(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    action: str,
) -> None:
    """Run the variant's delete, purge its reports, resolve its notifications, log.

    Raises TargetNotFoundError if the item does not exist and
    ContentDeletionFailedError if the store rejects the delete.
    """
    target = get_target(target_type)
    try:
        async with db.begin_nested():
            await target.delete(db, target_id)
            purged = await db.execute(
                sa.delete(Report).where(
                    Report.target_type == target_type, Report.target_id == target_id
                )
            )
            await resolve_admin_notifications(db, target_type, target_id)
            await write_admin_log(
                db,
                admin_id=admin_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                details={"purged_reports": purged.rowcount},
            )
    except SQLAlchemyError as exc:
        logger.warning("Delete of %s %s failed: %s", target_type.value, target_id, exc)
        raise ContentDeletionFailedError() from exc
    logger.info(
        "Admin %s deleted %s %s (%s)", admin_id, target_type.value, target_id, action
    )


# ── Hidden-content queue ───────────────────────────────────────────────────────

async def get_hidden_content(
    db: AsyncSession,
    target_type: ReportTargetType | None = None,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[HiddenItem]:
    """Hidden items with their report counts, most recently hidden first.

    With no type filter each content variant contributes up to ten items.
    """
    if target_type is not None:
        types = (target_type,)
        per_type_limit, per_type_offset = limit, offset
    else:
        types = CONTENT_TYPES
        per_type_limit, per_type_offset = _MIXED_QUEUE_PER_TYPE, 0

    items: list[HiddenItem] = []
    for variant in types:
        target = get_target(variant)
        rows = await target.list_hidden(db, per_type_limit, per_type_offset)
        ids = [getattr(row, target.id_column.key) for row, _ in rows]
        counts = await count_reports_by_target(db, variant, ids)
        for (row, owner), target_id in zip(rows, ids):
            items.append(
                HiddenItem(
                    target_type=variant,
                    target_id=target_id,
                    summary=target.describe(row),
                    owner=owner,
                    report_count=counts.get(target_id, 0),
                    hidden_at=getattr(row, target.hidden_at_column.key),
                )
            )

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    items.sort(key=lambda i: _aware(i.hidden_at) or epoch, reverse=True)
    if target_type is None:
        return items[:limit]
    return items


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def restore_content(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> None:
    """Un-hide an item, resolve its reports and notifications."""
    target = get_target(target_type)
    async with db.begin_nested():
        await target.restore(db, target_id)
        resolved = await db.execute(
            sa.update(Report)
            .where(Report.target_type == target_type, Report.target_id == target_id)
            .values(status=ReportStatus.RESOLVED, updated_at=datetime.now(timezone.utc))
        )
        await resolve_admin_notifications(db, target_type, target_id)
        await write_admin_log(
            db,
            admin_id=admin_id,
            action="restore_content",
            target_type=target_type,
            target_id=target_id,
            details={"resolved_reports": resolved.rowcount},
        )
    logger.info("Admin %s restored %s %s", admin_id, target_type.value, target_id)


async def delete_hidden_content(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> None:
    await delete_target(
        db,
        admin_id=admin_id,
        target_type=target_type,
        target_id=target_id,
        action="delete_hidden_content",
    )


# ── Admin notifications ────────────────────────────────────────────────────────

async def list_admin_notifications(
    db: AsyncSession, *, unread_only: bool = False, limit: int = 20
) -> tuple[list[AdminNotification], int]:
    """Return (newest notifications, total unread count)."""
    stmt = sa.select(AdminNotification)
    if unread_only:
        stmt = stmt.where(AdminNotification.is_read.is_(False))
    stmt = stmt.order_by(
        AdminNotification.created_at.desc(), AdminNotification.admin_notification_id.desc()
    ).limit(limit)
    items = list((await db.execute(stmt)).scalars().all())

    unread = (
        await db.execute(
            sa.select(sa.func.count(AdminNotification.admin_notification_id)).where(
                AdminNotification.is_read.is_(False)
            )
        )
    ).scalar_one()
    return items, unread


async def mark_admin_notification_read(db: AsyncSession, notification_id: uuid.UUID) -> None:
    result = await db.execute(
        sa.update(AdminNotification)
        .where(AdminNotification.admin_notification_id == notification_id)
        .values(is_read=True)
    )
    if result.rowcount == 0:
        raise AdminNotificationNotFoundError()


async def mark_all_admin_notifications_read(db: AsyncSession) -> int:
    result = await db.execute(
        sa.update(AdminNotification)
        .where(AdminNotification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount
