from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.events import service
from app.events.schemas import EventItem
from app.pagination import CursorPage, build_cursor_page
from app.schemas import UserRef


async def get_events(
    db: AsyncSession,
    viewer_id: UUID | None,
    upcoming_only: bool,
    cursor: UUID | None,
    limit: int,
) -> CursorPage[EventItem]:
    rows = await service.get_events(
        db=db, viewer_id=viewer_id, upcoming_only=upcoming_only, cursor=cursor, limit=limit
    )
    return build_cursor_page(
        rows,
        limit,
        lambda row: row[0].event_id,
        lambda row: EventItem(
            event_id=row[0].event_id,
            title=row[0].title,
            description=row[0].description,
            start_date=row[0].start_date,
            organizer=UserRef.model_validate(row[1]),
            created_at=row[0].created_at,
        ),
    )
