"""Response shapes shared across domains."""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class UserRef(BaseModel):
    """Minimal account profile embedded in list items."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nickname: str
    avatar_url: str | None = None
    bio: str | None = None
