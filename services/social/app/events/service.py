"""Events domain — community event listing."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.models.user import User
from app.pagination import apply_id_cursor
from app.visibility.filters import apply_exclusion, visible_events
from app.visibility.service import get_blocked_user_ids


async def get_events(
    db: AsyncSession,
    viewer_id: UUID | None = None,
    upcoming_only: bool = False,
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[tuple[Event, User]]:
    """Visible events with their organisers, newest first.

    With *upcoming_only*, events that already started are dropped; undated
    events are kept.
    """
    excluded = await get_blocked_user_ids(db, viewer_id) if viewer_id is not None else set()
    stmt = select(Event, User).join(User, User.id == Event.created_by).where(visible_events())
    if upcoming_only:
        stmt = stmt.where(
            or_(Event.start_date.is_(None), Event.start_date >= datetime.now(timezone.utc))
        )
    stmt = apply_exclusion(stmt, Event.created_by, excluded)
    stmt = apply_id_cursor(stmt, Event.event_id, Event.created_at, cursor, limit)
    return list((await db.execute(stmt)).tuples().all())
