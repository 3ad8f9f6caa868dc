from uuid import UUID

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, get_redis
from app.feed import controller
from app.feed.schemas import RecommendedUsersResponse, TrendingGenresResponse
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from app.posts.schemas import PostSummary
from shared.models.user import CurrentUser

router = APIRouter(prefix="/feed", tags=["Feed"])


@router.get(
    "/timeline",
    response_model=CursorPage[PostSummary],
    summary="Home timeline",
    description=(
        "Posts by followed accounts and your own, newest first. Posts by users "
        "you blocked or muted and hidden posts are excluded."
    ),
)
async def get_timeline(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size."),
    cursor: UUID | None = Query(None, description="`next_cursor` from the previous page."),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[PostSummary]:
    return await controller.get_timeline(
        user_id=current_user.id, db=db, limit=limit, cursor=cursor
    )


@router.get(
    "/recommended-users",
    response_model=RecommendedUsersResponse,
    summary="Accounts to follow",
    description="Public accounts you do not follow yet, most-followed first.",
)
async def get_recommended_users(
    limit: int = Query(5, ge=1, le=20),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> RecommendedUsersResponse:
    return await controller.get_recommended_users(user_id=current_user.id, db=db, limit=limit)


@router.get(
    "/trending-genres",
    response_model=TrendingGenresResponse,
    summary="Trending genres",
    description="Genres with the most posts in the last 48 hours. Cached for 5 minutes.",
)
async def get_trending_genres(
    limit: int = Query(5, ge=1, le=20),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> TrendingGenresResponse:
    return await controller.get_trending_genres(db=db, redis=redis, limit=limit)
