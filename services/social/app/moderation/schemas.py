import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.models.enums import AdminNotificationType, ReportTargetType
from app.schemas import UserRef


# Variants the hidden-content queue can be filtered by
HiddenContentType = Literal["post", "comment", "event", "shop", "review"]


class HiddenContentItem(BaseModel):
    target_type: ReportTargetType
    target_id: uuid.UUID
    summary: str
    owner: UserRef
    report_count: int
    hidden_at: datetime | None = None


class HiddenContentResponse(BaseModel):
    items: list[HiddenContentItem]


class AdminNotificationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: AdminNotificationType
    target_type: ReportTargetType
    target_id: uuid.UUID
    message: str
    report_count: int
    is_read: bool
    is_resolved: bool
    resolved_at: datetime | None = None
    created_at: datetime


class AdminNotificationsResponse(BaseModel):
    items: list[AdminNotificationItem]
    unread_count: int
