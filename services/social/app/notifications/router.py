from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.notifications import controller
from app.notifications.schemas import NotificationSummary, UnreadCountResponse
from app.pagination import DEFAULT_PAGE_SIZE, CursorPage
from app.schemas import SuccessResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=CursorPage[NotificationSummary],
    summary="List my notifications",
    description=(
        "Returns notifications for the authenticated user, newest first. "
        "Notifications from muted users and from users with a block in either "
        "direction are omitted."
    ),
)
async def list_notifications(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=50, description="Page size."),
    cursor: UUID | None = Query(None, description="`next_cursor` from the previous page."),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[NotificationSummary]:
    return await controller.get_notifications(
        user_id=current_user.id, db=db, limit=limit, cursor=cursor
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count my unread notifications",
)
async def unread_count(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    return await controller.get_unread_count(user_id=current_user.id, db=db)


@router.post(
    "/mark-all-read",
    response_model=SuccessResponse,
    summary="Mark all my notifications as read",
)
async def mark_all_read(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await controller.mark_all_read(user_id=current_user.id, db=db)


@router.post(
    "/{notification_id}/read",
    response_model=SuccessResponse,
    summary="Mark a single notification as read",
)
async def mark_read(
    notification_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await controller.mark_read(
        user_id=current_user.id, notification_id=notification_id, db=db
    )
