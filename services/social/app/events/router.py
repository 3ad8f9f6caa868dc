from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_optional_user
from app.events import controller
from app.events.schemas import EventItem
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from shared.models.user import CurrentUser

router = APIRouter(prefix="/events", tags=["Events"])


@router.get(
    "",
    response_model=CursorPage[EventItem],
    summary="Community events",
    description="Newest first. Hidden events are never listed.",
)
async def get_events(
    upcoming_only: bool = Query(False, description="Drop events that already started."),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size."),
    cursor: UUID | None = Query(None, description="`next_cursor` from the previous page."),
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[EventItem]:
    return await controller.get_events(
        db=db,
        viewer_id=current_user.id if current_user is not None else None,
        upcoming_only=upcoming_only,
        cursor=cursor,
        limit=limit,
    )
