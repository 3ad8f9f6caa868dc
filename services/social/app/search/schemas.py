from __future__ import annotations

import uuid

from pydantic import BaseModel

from app.pagination import CursorPage
from app.posts.schemas import PostSummary
from app.search.constants import SearchMode


class HashtagRef(BaseModel):
    name: str
    count: int


class TagSearchResponse(CursorPage[PostSummary]):
    hashtag: HashtagRef


class PopularTag(BaseModel):
    tag: str
    count: int


class PopularTagsResponse(BaseModel):
    tags: list[PopularTag]


class GenreItem(BaseModel):
    genre_id: uuid.UUID
    name: str
    category: str


class GenreCatalogResponse(BaseModel):
    """Genres keyed by category, categories in display order."""

    genres: dict[str, list[GenreItem]]


class SearchStatusResponse(BaseModel):
    mode: SearchMode
    extensions: dict[str, bool]
    ready: bool
