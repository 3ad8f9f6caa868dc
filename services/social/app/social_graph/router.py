"""
Social graph domain — user-facing routes.

Routes (prefix /api/v1/users):
  POST   /{user_id}/follow         Toggle follow (50/hour rate limit)
  DELETE /{user_id}/follow         Unfollow
  POST   /{user_id}/block          Block (removes follow edges both ways)
  DELETE /{user_id}/block          Unblock
  POST   /{user_id}/mute           Mute
  DELETE /{user_id}/mute           Unmute
  GET    /me/blocked               My block list (cursor)
  GET    /me/muted                 My mute list (cursor)
  GET    /{user_id}/following      User's following (404 if they blocked me)
  GET    /{user_id}/followers      User's followers (404 if they blocked me)
  GET    /{user_id}/relationship   Follow / block / mute status between me and user

/me/... routes are registered before /{user_id}/... routes of the same shape.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from app.rate_limit import limiter
from app.schemas import SuccessResponse
from app.social_graph import controller as ctrl
from app.social_graph.schemas import (
    FollowListItem,
    FollowToggleResponse,
    RelationshipResponse,
    SocialRelationItem,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["Social graph"])

_CURSOR = Query(None, description="`next_cursor` from the previous page.")
_LIMIT = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size.")


# ── My lists ───────────────────────────────────────────────────────────────────

@router.get("/me/blocked", response_model=CursorPage[SocialRelationItem], summary="My block list")
async def my_blocked(
    cursor: uuid.UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[SocialRelationItem]:
    return await ctrl.list_blocked(session, current_user.id, cursor, limit)


@router.get("/me/muted", response_model=CursorPage[SocialRelationItem], summary="My mute list")
async def my_muted(
    cursor: uuid.UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[SocialRelationItem]:
    return await ctrl.list_muted(session, current_user.id, cursor, limit)


# ── Follow ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/follow",
    response_model=FollowToggleResponse,
    summary="Follow or unfollow a user",
    description=(
        "Follows the user, or unfollows when already following. Refused while a "
        "block exists in either direction. Rate-limited to 50 actions per hour."
    ),
)
@limiter.limit("50/hour")
async def follow_user(
    request: Request,
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> FollowToggleResponse:
    return await ctrl.follow_user(session, current_user.id, user_id)


@router.delete("/{user_id}/follow", response_model=SuccessResponse, summary="Unfollow a user")
async def unfollow_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.unfollow_user(session, current_user.id, user_id)


# ── Block ──────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/block",
    response_model=SuccessResponse,
    summary="Block a user",
    description="Also removes follow edges in both directions.",
)
async def block_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.block_user(session, current_user.id, user_id)


@router.delete("/{user_id}/block", response_model=SuccessResponse, summary="Unblock a user")
async def unblock_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.unblock_user(session, current_user.id, user_id)


# ── Mute ───────────────────────────────────────────────────────────────────────

@router.post("/{user_id}/mute", response_model=SuccessResponse, summary="Mute a user")
async def mute_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.mute_user(session, current_user.id, user_id)


@router.delete("/{user_id}/mute", response_model=SuccessResponse, summary="Unmute a user")
async def unmute_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.unmute_user(session, current_user.id, user_id)


# ── Another user's lists ───────────────────────────────────────────────────────

@router.get(
    "/{user_id}/following",
    response_model=CursorPage[FollowListItem],
    summary="View a user's following list",
    description="Returns 404 if the target user has blocked you.",
)
async def user_following(
    user_id: uuid.UUID,
    cursor: uuid.UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[FollowListItem]:
    return await ctrl.list_following(session, user_id, current_user.id, cursor, limit)


@router.get(
    "/{user_id}/followers",
    response_model=CursorPage[FollowListItem],
    summary="View a user's followers list",
    description="Returns 404 if the target user has blocked you.",
)
async def user_followers(
    user_id: uuid.UUID,
    cursor: uuid.UUID | None = _CURSOR,
    limit: int = _LIMIT,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[FollowListItem]:
    return await ctrl.list_followers(session, user_id, current_user.id, cursor, limit)


@router.get(
    "/{user_id}/relationship",
    response_model=RelationshipResponse,
    summary="Relationship status between me and a user",
)
async def relationship(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> RelationshipResponse:
    return await ctrl.relationship(session, current_user.id, user_id)
