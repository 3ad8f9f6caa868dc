from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.posts.service import MAX_GENRES_PER_POST
from app.schemas import UserRef

MAX_POST_LENGTH = 500


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=MAX_POST_LENGTH)
    genre_ids: list[uuid.UUID] = Field(default_factory=list, max_length=MAX_GENRES_PER_POST)


class GenreRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    genre_id: uuid.UUID
    name: str
    category: str


class PostSummary(BaseModel):
    """Post as rendered in feeds and search results."""

    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    content: str
    author: UserRef
    genres: list[GenreRef]
    created_at: datetime


class CommentItem(BaseModel):
    comment_id: uuid.UUID
    content: str
    author: UserRef
    created_at: datetime


class CommentCountResponse(BaseModel):
    count: int
