"""
Social graph domain — Pydantic V2 response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.schemas import UserRef


class FollowToggleResponse(BaseModel):
    success: bool = True
    is_following: bool


class FollowListItem(BaseModel):
    id: uuid.UUID            # follow_id, usable as the next cursor
    user: UserRef            # the other party
    created_at: datetime
    is_followed_by_me: bool


class SocialRelationItem(BaseModel):
    """Item for blocked / muted lists."""

    id: uuid.UUID            # block_id / mute_id
    user: UserRef
    created_at: datetime


class RelationshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_following: bool
    is_followed_by: bool
    is_blocking: bool
    is_blocked_by: bool
    is_muting: bool
