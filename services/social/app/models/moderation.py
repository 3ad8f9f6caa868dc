"""
Moderation tables.

  reports               — user reports against any ReportTargetType
  admin_notifications   — back-office inbox (auto-hide events)
  admin_logs            — audit trail of moderator actions
"""
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.enums import (
    AdminNotificationType,
    ReportReason,
    ReportStatus,
    ReportTargetType,
    admin_notification_type_enum,
    report_reason_enum,
    report_status_enum,
    report_target_type_enum,
)
from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Report(Base):
    __tablename__ = "reports"

    report_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_type: Mapped[ReportTargetType] = mapped_column(report_target_type_enum, nullable=False)
    # Polymorphic reference; resolved through app.moderation.targets
    target_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    reason: Mapped[ReportReason] = mapped_column(report_reason_enum, nullable=False)
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        report_status_enum, nullable=False, default=ReportStatus.PENDING
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "reporter_id", "target_type", "target_id", name="uq_reports_reporter_target"
        ),
        sa.Index("ix_reports_target", "target_type", "target_id"),
        sa.Index("ix_reports_status_created_at", "status", "created_at"),
    )


class AdminNotification(Base):
    __tablename__ = "admin_notifications"

    admin_notification_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4
    )
    type: Mapped[AdminNotificationType] = mapped_column(
        admin_notification_type_enum, nullable=False
    )
    target_type: Mapped[ReportTargetType] = mapped_column(report_target_type_enum, nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    message: Mapped[str] = mapped_column(sa.Text, nullable=False)
    report_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    is_read: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    is_resolved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    resolved_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.Index("ix_admin_notifications_target", "target_type", "target_id"),
        sa.Index("ix_admin_notifications_is_read", "is_read", "created_at"),
    )


class AdminLog(Base):
    __tablename__ = "admin_logs"

    admin_log_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    admin_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    action: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    details: Mapped[dict | None] = mapped_column(
        sa.JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (sa.Index("ix_admin_logs_admin_created_at", "admin_id", "created_at"),)
