from __future__ import annotations

import uuid

from pydantic import BaseModel

from app.schemas import UserRef


class RecommendedUser(UserRef):
    follower_count: int


class RecommendedUsersResponse(BaseModel):
    items: list[RecommendedUser]


class TrendingGenre(BaseModel):
    genre_id: uuid.UUID
    name: str
    category: str
    post_count: int


class TrendingGenresResponse(BaseModel):
    items: list[TrendingGenre]
