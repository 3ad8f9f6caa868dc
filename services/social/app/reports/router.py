"""
Reports domain — user-facing routes.

Routes (prefix /api/v1/reports):
  POST /    File a report (20/hour rate limit)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_current_user, get_settings
from app.rate_limit import limiter
from app.reports import controller as ctrl
from app.reports.schemas import CreateReportRequest, CreateReportResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post(
    "",
    response_model=CreateReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report content or an account",
    description=(
        "Files a report against a post, comment, event, shop, review or user. "
        "Reporting your own content returns 403; reporting the same target twice "
        "returns 409. Once a target reaches the configured number of reports it "
        "is hidden automatically and moderators are notified."
    ),
)
@limiter.limit("20/hour")
async def create_report(
    request: Request,
    body: CreateReportRequest,
    current_user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> CreateReportResponse:
    return await ctrl.submit_report(
        db, current_user.id, body, threshold=settings.auto_hide_threshold
    )
