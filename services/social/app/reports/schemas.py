import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ReportReason, ReportStatus, ReportTargetType


class CreateReportRequest(BaseModel):
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: ReportReason
    description: str | None = Field(None, max_length=1000)


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    report_id: uuid.UUID
    reporter_id: uuid.UUID
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: ReportReason
    description: str | None = None
    status: ReportStatus
    created_at: datetime
    updated_at: datetime


class CreateReportResponse(BaseModel):
    success: Literal[True] = True
    report: ReportResponse
    auto_hidden: bool = Field(
        description="True when this report pushed the target over the auto-hide threshold."
    )


class UpdateReportStatusRequest(BaseModel):
    # Moderators cannot set auto_hidden or move a report back to pending
    status: Literal["reviewed", "resolved", "dismissed"]
    note: str | None = Field(None, max_length=1000)


class ReportStatsResponse(BaseModel):
    total: int
    by_status: dict[ReportStatus, int]
    by_target_type: dict[ReportTargetType, int]
