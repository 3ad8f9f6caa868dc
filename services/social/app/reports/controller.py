"""
Reports domain — request orchestration.
"""
from __future__ import annotations

import logging
import uuid

from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import invalidate_post_aggregates
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, OperationFailedError
from app.models.enums import ReportStatus, ReportTargetType
from app.moderation.exceptions import ContentDeletionFailedError, TargetNotFoundError
from app.pagination import OffsetPage
from app.reports import service as svc
from app.reports.exceptions import (
    DuplicateReportError,
    InvalidStatusTransitionError,
    ReportAlreadyProcessedError,
    ReportNotFoundError,
    SelfReportError,
)
from app.reports.schemas import (
    CreateReportRequest,
    CreateReportResponse,
    ReportResponse,
    ReportStatsResponse,
    UpdateReportStatusRequest,
)

logger = logging.getLogger(__name__)


async def submit_report(
    db: AsyncSession, reporter_id: uuid.UUID, body: CreateReportRequest, threshold: int
) -> CreateReportResponse:
    try:
        outcome = await svc.create_report(
            db,
            reporter_id=reporter_id,
            target_type=body.target_type,
            target_id=body.target_id,
            reason=body.reason,
            description=body.description,
            threshold=threshold,
        )
    except TargetNotFoundError:
        raise NotFoundError("Report target")
    except SelfReportError:
        raise ForbiddenError("You cannot report your own content.")
    except DuplicateReportError:
        raise ConflictError("You have already reported this content.")
    except SQLAlchemyError:
        logger.exception("Failed to file report on %s %s", body.target_type.value, body.target_id)
        raise OperationFailedError("Failed to submit the report.")
    return CreateReportResponse(
        report=ReportResponse.model_validate(outcome.report),
        auto_hidden=outcome.auto_hidden,
    )


async def list_reports(
    db: AsyncSession,
    status: ReportStatus | None,
    target_type: ReportTargetType | None,
    page: int,
    page_size: int,
) -> OffsetPage[ReportResponse]:
    items, total = await svc.get_reports(
        db,
        status=status,
        target_type=target_type,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return OffsetPage.build(
        items=[ReportResponse.model_validate(r) for r in items],
        total=total,
        page=page,
        page_size=page_size,
    )


async def report_stats(db: AsyncSession) -> ReportStatsResponse:
    return ReportStatsResponse(**await svc.get_report_stats(db))


async def update_status(
    db: AsyncSession, admin_id: uuid.UUID, report_id: uuid.UUID, body: UpdateReportStatusRequest
) -> ReportResponse:
    try:
        report = await svc.update_report_status(
            db,
            admin_id=admin_id,
            report_id=report_id,
            new_status=ReportStatus(body.status),
            note=body.note,
        )
    except ReportNotFoundError:
        raise NotFoundError("Report")
    except ReportAlreadyProcessedError:
        raise ConflictError("This report has already been processed.")
    except InvalidStatusTransitionError:
        raise ConflictError("The report cannot move to that status.")
    except SQLAlchemyError:
        logger.exception("Failed to update report %s", report_id)
        raise OperationFailedError("Failed to update the report.")
    return ReportResponse.model_validate(report)


async def delete_content(
    db: AsyncSession,
    redis: Redis | None,
    admin_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
) -> dict:
    try:
        await svc.delete_reported_content(
            db, admin_id=admin_id, target_type=target_type, target_id=target_id
        )
    except TargetNotFoundError:
        raise NotFoundError("Content")
    except ContentDeletionFailedError:
        raise OperationFailedError("Failed to delete the content.")
    if target_type == ReportTargetType.POST:
        await invalidate_post_aggregates(redis)
    return {"success": True}
