"""
Shops domain — bonsai nursery directory and reviews.

Hidden shops and hidden reviews never leave this module. For a signed-in
viewer, shops and reviews by accounts with a block in either direction are
dropped as well.
"""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shop import Shop, ShopReview
from app.models.user import User
from app.pagination import apply_id_cursor
from app.shops.exceptions import ShopNotFoundError
from app.visibility.filters import apply_exclusion, visible_reviews, visible_shops
from app.visibility.service import get_blocked_user_ids


async def _exclusions(viewer_id: UUID | None, db: AsyncSession) -> set[UUID]:
    if viewer_id is None:
        return set()
    return await get_blocked_user_ids(db, viewer_id)


async def get_shops(
    db: AsyncSession,
    viewer_id: UUID | None = None,
    search: str | None = None,
    cursor: UUID | None = None,
    limit: int = 20,
) -> list[tuple[Shop, User]]:
    """Visible shops with their creators, newest first.

    *search* matches name or address case-insensitively.
    """
    excluded = await _exclusions(viewer_id, db)
    stmt = select(Shop, User).join(User, User.id == Shop.created_by).where(visible_shops())
    if search:
        stmt = stmt.where(
            or_(
                Shop.name.icontains(search, autoescape=True),
                Shop.address.icontains(search, autoescape=True),
            )
        )
    stmt = apply_exclusion(stmt, Shop.created_by, excluded)
    stmt = apply_id_cursor(stmt, Shop.shop_id, Shop.created_at, cursor, limit)
    return list((await db.execute(stmt)).tuples().all())


async def get_shop(
    shop_id: UUID,
    db: AsyncSession,
    viewer_id: UUID | None = None,
) -> tuple[Shop, User, list[tuple[ShopReview, User]]]:
    row = (
        await db.execute(
            select(Shop, User)
            .join(User, User.id == Shop.created_by)
            .where(Shop.shop_id == shop_id, visible_shops())
        )
    ).tuples().one_or_none()
    if row is None:
        raise ShopNotFoundError()
    shop, creator = row

    excluded = await _exclusions(viewer_id, db)
    if creator.id in excluded:
        raise ShopNotFoundError()
    stmt = (
        select(ShopReview, User)
        .join(User, User.id == ShopReview.user_id)
        .where(ShopReview.shop_id == shop_id, visible_reviews())
        .order_by(ShopReview.created_at.desc(), ShopReview.review_id.desc())
    )
    stmt = apply_exclusion(stmt, ShopReview.user_id, excluded)
    reviews = list((await db.execute(stmt)).tuples().all())
    return shop, creator, reviews
