from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, get_optional_user, get_redis
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from app.posts import controller
from app.posts.schemas import CommentCountResponse, CommentItem, CreatePostRequest, PostSummary
from app.schemas import SuccessResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post(
    "",
    response_model=PostSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
    description="Links up to 3 genres and registers every #hashtag in the text.",
)
async def create_post(
    body: CreatePostRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> PostSummary:
    return await controller.create_post(
        user_id=current_user.id, body=body, db=db, redis=redis
    )


@router.delete("/{post_id}", response_model=SuccessResponse, summary="Delete my post")
async def delete_post(
    post_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> dict:
    return await controller.delete_post(
        user_id=current_user.id, post_id=post_id, db=db, redis=redis
    )


@router.get(
    "/{post_id}/comments",
    response_model=CursorPage[CommentItem],
    summary="Comments on a post",
    description=(
        "Newest first. Hidden comments are never listed, and signed-in viewers do not "
        "see comments from accounts with a block in either direction."
    ),
)
async def get_comments(
    post_id: UUID,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size."),
    cursor: UUID | None = Query(None, description="`next_cursor` from the previous page."),
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[CommentItem]:
    return await controller.get_comments(
        post_id=post_id,
        db=db,
        viewer_id=current_user.id if current_user is not None else None,
        cursor=cursor,
        limit=limit,
    )


@router.get(
    "/{post_id}/comments/count",
    response_model=CommentCountResponse,
    summary="Visible comment count",
)
async def get_comment_count(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CommentCountResponse:
    return await controller.get_comment_count(post_id=post_id, db=db)
