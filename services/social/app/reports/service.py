"""
Reports domain — report aggregation and auto-hide.

Status machine:
  pending  → reviewed | resolved | dismissed     (moderator)
  pending  → auto_hidden                         (threshold reached)
  reviewed → resolved | dismissed                (moderator)
  resolved, dismissed, auto_hidden are terminal.

Auto-hide fires when the report count for a target reaches the threshold.
It runs inside a SAVEPOINT and only the call that flips the target's hidden
flag from false to true creates the admin notification; later reports on an
already hidden target are just marked auto_hidden.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    AdminNotificationType,
    ReportReason,
    ReportStatus,
    ReportTargetType,
)
from app.models.moderation import AdminNotification, Report
from app.moderation.service import delete_target, write_admin_log
from app.moderation.targets import ModerationTarget, get_target
from app.reports.exceptions import (
    DuplicateReportError,
    InvalidStatusTransitionError,
    ReportAlreadyProcessedError,
    ReportNotFoundError,
    SelfReportError,
)

logger = logging.getLogger(__name__)

DEFAULT_AUTO_HIDE_THRESHOLD = 10

TERMINAL_STATUSES = frozenset(
    {ReportStatus.RESOLVED, ReportStatus.DISMISSED, ReportStatus.AUTO_HIDDEN}
)

_MODERATOR_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset(
        {ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
    ),
    ReportStatus.REVIEWED: frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED}),
}


@dataclass(frozen=True)
class ReportOutcome:
    report: Report
    report_count: int
    auto_hidden: bool


# ── Submit ─────────────────────────────────────────────────────────────────────

async def _report_exists(
    db: AsyncSession,
    reporter_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> bool:
    result = await db.execute(
        sa.select(
            sa.exists().where(
                Report.reporter_id == reporter_id,
                Report.target_type == target_type,
                Report.target_id == target_id,
            )
        )
    )
    return bool(result.scalar())


async def count_reports(
    db: AsyncSession, target_type: ReportTargetType, target_id: uuid.UUID
) -> int:
    result = await db.execute(
        sa.select(sa.func.count(Report.report_id)).where(
            Report.target_type == target_type, Report.target_id == target_id
        )
    )
    return result.scalar_one()


async def _auto_hide(
    db: AsyncSession,
    target: ModerationTarget,
    target_id: uuid.UUID,
    report_count: int,
) -> bool:
    """Hide the target and settle its pending reports. True on the hiding transition."""
    transitioned = await target.hide(db, target_id)
    await db.execute(
        sa.update(Report)
        .where(
            Report.target_type == target.target_type,
            Report.target_id == target_id,
            Report.status == ReportStatus.PENDING,
        )
        .values(status=ReportStatus.AUTO_HIDDEN)
        .execution_options(synchronize_session=False)
    )
    if not transitioned:
        return False

    db.add(
        AdminNotification(
            type=AdminNotificationType.AUTO_HIDDEN,
            target_type=target.target_type,
            target_id=target_id,
            message=(
                f"{target.label} was automatically hidden after receiving "
                f"{report_count} reports"
            ),
            report_count=report_count,
        )
    )
    await db.flush()
    logger.warning(
        "Auto-hid %s %s after %d reports", target.target_type.value, target_id, report_count
    )
    return True


async def create_report(
    db: AsyncSession,
    *,
    reporter_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    reason: ReportReason,
    description: str | None = None,
    threshold: int = DEFAULT_AUTO_HIDE_THRESHOLD,
) -> ReportOutcome:
    """File a report and run auto-hide once the target reaches *threshold* reports.

    Raises TargetNotFoundError, SelfReportError or DuplicateReportError
    before anything is written.
    """
    target = get_target(target_type)
    owner_id = await target.get_owner_id(db, target_id)
    if owner_id == reporter_id:
        raise SelfReportError()
    if await _report_exists(db, reporter_id, target_type, target_id):
        raise DuplicateReportError()

    report = Report(
        reporter_id=reporter_id,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        description=description,
        status=ReportStatus.PENDING,
    )
    try:
        async with db.begin_nested():
            db.add(report)
            await db.flush()
    except IntegrityError as exc:
        # Concurrent duplicate slipped past the existence check
        raise DuplicateReportError() from exc

    report_count = await count_reports(db, target_type, target_id)
    auto_hidden = False
    if report_count >= threshold:
        async with db.begin_nested():
            auto_hidden = await _auto_hide(db, target, target_id, report_count)
        await db.refresh(report)

    logger.info(
        "Report %s on %s %s by %s (count=%d)",
        report.report_id, target_type.value, target_id, reporter_id, report_count,
    )
    return ReportOutcome(report=report, report_count=report_count, auto_hidden=auto_hidden)


# ── Admin listing ──────────────────────────────────────────────────────────────

async def get_reports(
    db: AsyncSession,
    *,
    status: ReportStatus | None = None,
    target_type: ReportTargetType | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Report], int]:
    filters = []
    if status is not None:
        filters.append(Report.status == status)
    if target_type is not None:
        filters.append(Report.target_type == target_type)

    total = (
        await db.execute(sa.select(sa.func.count(Report.report_id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        sa.select(Report)
        .where(*filters)
        .order_by(Report.created_at.desc(), Report.report_id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total


async def get_report_stats(db: AsyncSession) -> dict:
    by_status = {s: 0 for s in ReportStatus}
    for status, count in (
        await db.execute(
            sa.select(Report.status, sa.func.count(Report.report_id)).group_by(Report.status)
        )
    ).tuples():
        by_status[status] = count

    by_target_type = {t: 0 for t in ReportTargetType}
    for target_type, count in (
        await db.execute(
            sa.select(Report.target_type, sa.func.count(Report.report_id)).group_by(
                Report.target_type
            )
        )
    ).tuples():
        by_target_type[target_type] = count

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_target_type": by_target_type,
    }


# ── Moderator actions ──────────────────────────────────────────────────────────

async def update_report_status(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    report_id: uuid.UUID,
    new_status: ReportStatus,
    note: str | None = None,
) -> Report:
    report = await db.get(Report, report_id, with_for_update=True, populate_existing=True)
    if report is None:
        raise ReportNotFoundError()
    if report.status in TERMINAL_STATUSES:
        raise ReportAlreadyProcessedError()
    if new_status not in _MODERATOR_TRANSITIONS.get(report.status, frozenset()):
        raise InvalidStatusTransitionError()

    previous = report.status
    async with db.begin_nested():
        report.status = new_status
        await db.flush()
        await write_admin_log(
            db,
            admin_id=admin_id,
            action="update_report_status",
            target_type=report.target_type,
            target_id=report.target_id,
            details={
                "report_id": str(report.report_id),
                "previous_status": previous.value,
                "new_status": new_status.value,
                "note": note,
            },
        )
    logger.info(
        "Admin %s moved report %s %s → %s", admin_id, report_id, previous.value, new_status.value
    )
    return report


async def delete_reported_content(
    db: AsyncSession,
    *,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> None:
    """Delete (accounts: suspend) a reported item and purge its reports."""
    await delete_target(
        db,
        admin_id=admin_id,
        target_type=target_type,
        target_id=target_id,
        action="delete_reported_content",
    )
