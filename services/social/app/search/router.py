from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_optional_user, get_redis, get_settings
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from app.posts.schemas import PostSummary
from app.schemas import UserRef
from app.search import controller
from app.search.schemas import GenreCatalogResponse, PopularTagsResponse, TagSearchResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/search", tags=["Search"])

_CURSOR = Query(None, description="`next_cursor` from the previous page.")
_LIMIT = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size.")


def _viewer_id(user: CurrentUser | None) -> UUID | None:
    return user.id if user is not None else None


@router.get(
    "/posts",
    response_model=CursorPage[PostSummary],
    summary="Search posts",
    description=(
        "Keyword search over post text, optionally restricted to genres. "
        "Signed-in viewers never see posts from accounts with a block in either "
        "direction or from accounts they muted."
    ),
)
async def search_posts(
    q: str | None = Query(None, max_length=100, description="Keyword."),
    genre_ids: list[UUID] | None = Query(None, description="Genre filter."),
    cursor: UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CursorPage[PostSummary]:
    return await controller.search_posts(
        q=q,
        db=db,
        mode=settings.search_mode,
        viewer_id=_viewer_id(current_user),
        genre_ids=genre_ids or [],
        cursor=cursor,
        limit=limit,
    )


@router.get(
    "/users",
    response_model=CursorPage[UserRef],
    summary="Search users",
    description="Nickname / bio search. Suspended and blocked accounts are never returned.",
)
async def search_users(
    q: str = Query(..., min_length=1, max_length=100, description="Keyword."),
    cursor: UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CursorPage[UserRef]:
    return await controller.search_users(
        q=q,
        db=db,
        mode=settings.search_mode,
        viewer_id=_viewer_id(current_user),
        cursor=cursor,
        limit=limit,
    )


@router.get(
    "/tags/{tag}",
    response_model=TagSearchResponse,
    summary="Posts with a hashtag",
)
async def search_by_tag(
    tag: str,
    cursor: UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> TagSearchResponse:
    return await controller.search_by_tag(
        tag=tag, db=db, viewer_id=_viewer_id(current_user), cursor=cursor, limit=limit
    )


@router.get(
    "/popular-tags",
    response_model=PopularTagsResponse,
    summary="Popular hashtags",
    description="Hashtags used by the most posts in the last 7 days. Cached for 5 minutes.",
)
async def popular_tags(
    limit: int = Query(10, ge=1, le=20),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> PopularTagsResponse:
    return await controller.get_popular_tags(db=db, redis=redis, limit=limit)


@router.get(
    "/genres",
    response_model=GenreCatalogResponse,
    summary="Genre catalog",
    description="All genres grouped by category. Cached for 1 hour.",
)
async def genres(
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> GenreCatalogResponse:
    return await controller.get_all_genres(db=db, redis=redis)
