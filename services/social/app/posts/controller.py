from __future__ import annotations

import logging
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import invalidate_post_aggregates
from app.exceptions import ForbiddenError, NotFoundError, OperationFailedError, UnprocessableError
from app.posts import service
from app.posts.exceptions import (
    GenreNotFoundError,
    NotPostOwnerError,
    PostNotFoundError,
    TooManyGenresError,
)
from app.pagination import CursorPage, build_cursor_page
from app.posts.schemas import CommentCountResponse, CommentItem, CreatePostRequest, PostSummary
from app.schemas import UserRef

logger = logging.getLogger(__name__)


async def create_post(
    user_id: UUID, body: CreatePostRequest, db: AsyncSession, redis: Redis | None
) -> PostSummary:
    try:
        post = await service.create_post(
            user_id=user_id, content=body.content, genre_ids=body.genre_ids, db=db
        )
    except TooManyGenresError:
        raise UnprocessableError(f"A post can have at most {service.MAX_GENRES_PER_POST} genres.")
    except GenreNotFoundError:
        raise UnprocessableError("Unknown genre.")
    except SQLAlchemyError:
        logger.exception("Failed to create post for %s", user_id)
        raise OperationFailedError("Failed to create the post.")
    await invalidate_post_aggregates(redis)
    return PostSummary.model_validate(post)


async def delete_post(
    user_id: UUID, post_id: UUID, db: AsyncSession, redis: Redis | None
) -> dict:
    try:
        await service.delete_own_post(user_id=user_id, post_id=post_id, db=db)
    except PostNotFoundError:
        raise NotFoundError("Post")
    except NotPostOwnerError:
        raise ForbiddenError("You can only delete your own posts.")
    except SQLAlchemyError:
        logger.exception("Failed to delete post %s", post_id)
        raise OperationFailedError("Failed to delete the post.")
    await invalidate_post_aggregates(redis)
    return {"success": True}


async def get_comments(
    post_id: UUID, db: AsyncSession, viewer_id: UUID | None, cursor: UUID | None, limit: int
) -> CursorPage[CommentItem]:
    try:
        rows = await service.get_comments(
            post_id=post_id, db=db, viewer_id=viewer_id, cursor=cursor, limit=limit
        )
    except PostNotFoundError:
        raise NotFoundError("Post")
    return build_cursor_page(
        rows,
        limit,
        lambda row: row[0].comment_id,
        lambda row: CommentItem(
            comment_id=row[0].comment_id,
            content=row[0].content,
            author=UserRef.model_validate(row[1]),
            created_at=row[0].created_at,
        ),
    )


async def get_comment_count(post_id: UUID, db: AsyncSession) -> CommentCountResponse:
    return CommentCountResponse(count=await service.get_comment_count(post_id=post_id, db=db))
