"""
Reports domain — moderator routes.

Routes (prefix /api/v1/admin/reports, moderator role required):
  GET    /                                     Paged report list (status / type filters)
  GET    /stats                                Counts per status and per target type
  PATCH  /{report_id}/status                   Move a report through its status machine
  DELETE /content/{target_type}/{target_id}    Delete reported content (accounts are suspended)
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_redis, require_admin
from app.models.enums import ReportStatus, ReportTargetType
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, OffsetPage
from app.reports import controller as ctrl
from app.reports.schemas import ReportResponse, ReportStatsResponse, UpdateReportStatusRequest
from app.schemas import SuccessResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/reports", tags=["Admin: reports"])


@router.get("", response_model=OffsetPage[ReportResponse], summary="List reports")
async def list_reports(
    report_status: ReportStatus | None = Query(None, alias="status"),
    target_type: ReportTargetType | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> OffsetPage[ReportResponse]:
    return await ctrl.list_reports(db, report_status, target_type, page, page_size)


@router.get("/stats", response_model=ReportStatsResponse, summary="Report statistics")
async def report_stats(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ReportStatsResponse:
    return await ctrl.report_stats(db)


@router.patch(
    "/{report_id}/status",
    response_model=ReportResponse,
    summary="Update report status",
    description="Resolved, dismissed and auto-hidden reports are final (409).",
)
async def update_report_status(
    report_id: uuid.UUID,
    body: UpdateReportStatusRequest,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ReportResponse:
    return await ctrl.update_status(db, admin.id, report_id, body)


@router.delete(
    "/content/{target_type}/{target_id}",
    response_model=SuccessResponse,
    summary="Delete reported content",
)
async def delete_reported_content(
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> dict:
    return await ctrl.delete_content(db, redis, admin.id, target_type, target_id)
