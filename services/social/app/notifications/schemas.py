from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.models.enums import NotificationType


class ActorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    nickname: str
    avatar_url: str | None = None


class NotificationSummary(BaseModel):
    """Single notification item for the notifications feed."""

    id: UUID
    type: NotificationType
    actor: ActorSummary
    post_id: UUID | None = None
    comment_id: UUID | None = None
    created_at: datetime
    is_read: bool


class UnreadCountResponse(BaseModel):
    count: int
