"""
Moderation domain — admin routes.

Routes (prefix /api/v1/admin, moderator role required):
  GET    /hidden                                   Hidden-content queue
  POST   /hidden/{target_type}/{target_id}/restore Un-hide and resolve reports
  DELETE /hidden/{target_type}/{target_id}         Delete hidden content
  GET    /notifications                            Admin inbox + unread count
  POST   /notifications/mark-all-read
  POST   /notifications/{notification_id}/read
  GET    /search/status                            Active search mode and extension check
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_redis, get_settings, require_admin
from app.models.enums import ReportTargetType
from app.moderation import controller as ctrl
from app.moderation.schemas import (
    AdminNotificationsResponse,
    HiddenContentResponse,
    HiddenContentType,
)
from app.schemas import SuccessResponse
from app.search import controller as search_ctrl
from app.search.schemas import SearchStatusResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin", tags=["Admin: moderation"])


@router.get("/hidden", response_model=HiddenContentResponse, summary="Hidden-content queue")
async def list_hidden(
    target_type: HiddenContentType | None = Query(None, alias="type"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> HiddenContentResponse:
    variant = ReportTargetType(target_type) if target_type is not None else None
    return await ctrl.list_hidden(db, variant, limit, offset)


@router.post(
    "/hidden/{target_type}/{target_id}/restore",
    response_model=SuccessResponse,
    summary="Restore hidden content",
)
async def restore_hidden(
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.restore(db, admin.id, target_type, target_id)


@router.delete(
    "/hidden/{target_type}/{target_id}",
    response_model=SuccessResponse,
    summary="Delete hidden content",
)
async def delete_hidden(
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> dict:
    return await ctrl.delete_hidden(db, redis, admin.id, target_type, target_id)


@router.get(
    "/notifications",
    response_model=AdminNotificationsResponse,
    summary="Admin notifications",
)
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(20, ge=1, le=100),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminNotificationsResponse:
    return await ctrl.list_notifications(db, unread_only, limit)


@router.post(
    "/notifications/mark-all-read",
    response_model=SuccessResponse,
    summary="Mark all admin notifications read",
)
async def mark_all_notifications_read(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.mark_all_notifications_read(db)


@router.post(
    "/notifications/{notification_id}/read",
    response_model=SuccessResponse,
    summary="Mark an admin notification read",
)
async def mark_notification_read(
    notification_id: uuid.UUID,
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await ctrl.mark_notification_read(db, notification_id)


@router.get(
    "/search/status",
    response_model=SearchStatusResponse,
    summary="Search mode and extension status",
)
async def search_status(
    _admin: CurrentUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> SearchStatusResponse:
    return await search_ctrl.get_search_status(db, settings.search_mode)
