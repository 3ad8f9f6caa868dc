from __future__ import annotations

from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.pagination import CursorPage, build_cursor_page, next_cursor_for
from app.posts.schemas import PostSummary
from app.schemas import UserRef
from app.search import service
from app.search.constants import SearchMode
from app.search.exceptions import HashtagNotFoundError
from app.search.schemas import (
    GenreCatalogResponse,
    HashtagRef,
    PopularTag,
    PopularTagsResponse,
    SearchStatusResponse,
    TagSearchResponse,
)


async def search_posts(
    q: str | None,
    db: AsyncSession,
    mode: SearchMode,
    viewer_id: UUID | None,
    genre_ids: list[UUID],
    cursor: UUID | None,
    limit: int,
) -> CursorPage[PostSummary]:
    posts = await service.search_posts(
        q=q,
        db=db,
        mode=mode,
        viewer_id=viewer_id,
        genre_ids=genre_ids,
        cursor=cursor,
        limit=limit,
    )
    return build_cursor_page(posts, limit, lambda p: p.post_id, PostSummary.model_validate)


async def search_users(
    q: str,
    db: AsyncSession,
    mode: SearchMode,
    viewer_id: UUID | None,
    cursor: UUID | None,
    limit: int,
) -> CursorPage[UserRef]:
    users = await service.search_users(
        q=q, db=db, mode=mode, viewer_id=viewer_id, cursor=cursor, limit=limit
    )
    return build_cursor_page(users, limit, lambda u: u.id, UserRef.model_validate)


async def search_by_tag(
    tag: str,
    db: AsyncSession,
    viewer_id: UUID | None,
    cursor: UUID | None,
    limit: int,
) -> TagSearchResponse:
    try:
        hashtag, posts = await service.search_by_tag(
            tag=tag, db=db, viewer_id=viewer_id, cursor=cursor, limit=limit
        )
    except HashtagNotFoundError:
        raise NotFoundError("Hashtag")
    next_cursor = next_cursor_for(posts, limit, lambda p: p.post_id)
    return TagSearchResponse(
        hashtag=HashtagRef(name=hashtag.name, count=hashtag.count),
        items=[PostSummary.model_validate(p) for p in posts],
        next_cursor=next_cursor,
        has_more=next_cursor is not None,
    )


async def get_popular_tags(db: AsyncSession, redis: Redis | None, limit: int) -> PopularTagsResponse:
    items = await service.get_popular_tags(db=db, redis=redis, limit=limit)
    return PopularTagsResponse(tags=[PopularTag(**item) for item in items])


async def get_all_genres(db: AsyncSession, redis: Redis | None) -> GenreCatalogResponse:
    return GenreCatalogResponse(genres=await service.get_all_genres(db=db, redis=redis))


async def get_search_status(db: AsyncSession, mode: SearchMode) -> SearchStatusResponse:
    return SearchStatusResponse(**await service.get_search_status(db=db, mode=mode))
