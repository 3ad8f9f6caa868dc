from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_optional_user
from app.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CursorPage
from app.shops import controller
from app.shops.schemas import ShopDetail, ShopSummary
from shared.models.user import CurrentUser

router = APIRouter(prefix="/shops", tags=["Shops"])


@router.get(
    "",
    response_model=CursorPage[ShopSummary],
    summary="Bonsai shop directory",
    description="Newest first. Hidden shops are never listed.",
)
async def get_shops(
    search: str | None = Query(None, max_length=100, description="Name or address keyword."),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size."),
    cursor: UUID | None = Query(None, description="`next_cursor` from the previous page."),
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[ShopSummary]:
    return await controller.get_shops(
        db=db,
        viewer_id=current_user.id if current_user is not None else None,
        search=search,
        cursor=cursor,
        limit=limit,
    )


@router.get(
    "/{shop_id}",
    response_model=ShopDetail,
    summary="Shop detail with reviews",
    description="Hidden reviews are left out of both the list and the average rating.",
)
async def get_shop(
    shop_id: UUID,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> ShopDetail:
    return await controller.get_shop(
        shop_id=shop_id,
        db=db,
        viewer_id=current_user.id if current_user is not None else None,
    )
