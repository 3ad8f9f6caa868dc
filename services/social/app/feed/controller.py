from __future__ import annotations

from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.feed import service
from app.feed.schemas import (
    RecommendedUser,
    RecommendedUsersResponse,
    TrendingGenre,
    TrendingGenresResponse,
)
from app.pagination import CursorPage, build_cursor_page
from app.posts.schemas import PostSummary


async def get_timeline(
    user_id: UUID, db: AsyncSession, limit: int, cursor: UUID | None
) -> CursorPage[PostSummary]:
    posts = await service.get_timeline(user_id=user_id, db=db, limit=limit, cursor=cursor)
    return build_cursor_page(posts, limit, lambda p: p.post_id, PostSummary.model_validate)


async def get_recommended_users(
    user_id: UUID, db: AsyncSession, limit: int
) -> RecommendedUsersResponse:
    rows = await service.get_recommended_users(user_id=user_id, db=db, limit=limit)
    return RecommendedUsersResponse(
        items=[
            RecommendedUser(
                id=user.id,
                nickname=user.nickname,
                avatar_url=user.avatar_url,
                bio=user.bio,
                follower_count=count,
            )
            for user, count in rows
        ]
    )


async def get_trending_genres(
    db: AsyncSession, redis: Redis | None, limit: int
) -> TrendingGenresResponse:
    items = await service.get_trending_genres(db=db, redis=redis, limit=limit)
    return TrendingGenresResponse(items=[TrendingGenre(**item) for item in items])
