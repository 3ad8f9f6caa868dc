from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from app.schemas import UserRef


class EventItem(BaseModel):
    event_id: uuid.UUID
    title: str
    description: str | None = None
    start_date: datetime | None = None
    organizer: UserRef
    created_at: datetime
