from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.shop import Shop
from app.models.user import User
from app.pagination import CursorPage, build_cursor_page
from app.schemas import UserRef
from app.shops import service
from app.shops.exceptions import ShopNotFoundError
from app.shops.schemas import ReviewItem, ShopDetail, ShopSummary


def _summary(row: tuple[Shop, User]) -> ShopSummary:
    shop, creator = row
    return ShopSummary(
        shop_id=shop.shop_id,
        name=shop.name,
        address=shop.address,
        creator=UserRef.model_validate(creator),
        created_at=shop.created_at,
    )


async def get_shops(
    db: AsyncSession,
    viewer_id: UUID | None,
    search: str | None,
    cursor: UUID | None,
    limit: int,
) -> CursorPage[ShopSummary]:
    rows = await service.get_shops(
        db=db, viewer_id=viewer_id, search=search, cursor=cursor, limit=limit
    )
    return build_cursor_page(rows, limit, lambda row: row[0].shop_id, _summary)


async def get_shop(shop_id: UUID, db: AsyncSession, viewer_id: UUID | None) -> ShopDetail:
    try:
        shop, creator, reviews = await service.get_shop(
            shop_id=shop_id, db=db, viewer_id=viewer_id
        )
    except ShopNotFoundError:
        raise NotFoundError("Shop")
    ratings = [review.rating for review, _ in reviews]
    return ShopDetail(
        **_summary((shop, creator)).model_dump(),
        average_rating=round(sum(ratings) / len(ratings), 1) if ratings else None,
        reviews=[
            ReviewItem(
                review_id=review.review_id,
                rating=review.rating,
                content=review.content,
                author=UserRef.model_validate(author),
                created_at=review.created_at,
            )
            for review, author in reviews
        ],
    )
