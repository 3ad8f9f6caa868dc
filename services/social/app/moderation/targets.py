"""
Polymorphic moderation targets.

Every ReportTargetType maps to one ModerationTarget that knows how to find
the item's owner and how to hide, restore and delete it. Reports, the
hidden-content queue and the moderator actions dispatch through REGISTRY
instead of branching on the type.

Accounts are a target too: their hidden flag is ``is_suspended`` and their
"delete" suspends rather than removes the row.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.models.comment import Comment
from app.models.enums import ReportTargetType
from app.models.event import Event
from app.models.post import Post
from app.models.shop import Shop, ShopReview
from app.models.user import User
from app.moderation.exceptions import TargetNotFoundError
from app.posts.exceptions import PostNotFoundError
from app.posts.service import delete_post


class ModerationTarget:
    """Hide / restore / delete capability for one content variant."""

    def __init__(
        self,
        target_type: ReportTargetType,
        label: str,
        model: type,
        id_column: InstrumentedAttribute,
        owner_column: InstrumentedAttribute,
        hidden_column: InstrumentedAttribute,
        hidden_at_column: InstrumentedAttribute,
    ) -> None:
        self.target_type = target_type
        self.label = label
        self.model = model
        self.id_column = id_column
        self.owner_column = owner_column
        self.hidden_column = hidden_column
        self.hidden_at_column = hidden_at_column

    async def get_owner_id(self, db: AsyncSession, target_id: uuid.UUID) -> uuid.UUID:
        result = await db.execute(sa.select(self.owner_column).where(self.id_column == target_id))
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            raise TargetNotFoundError()
        return owner_id

    async def hide(self, db: AsyncSession, target_id: uuid.UUID) -> bool:
        """Set the hidden flag; True only if this call flipped it from false."""
        result = await db.execute(
            sa.update(self.model)
            .where(self.id_column == target_id, self.hidden_column.is_(False))
            .values({self.hidden_column: True, self.hidden_at_column: datetime.now(timezone.utc)})
        )
        return result.rowcount == 1

    async def restore(self, db: AsyncSession, target_id: uuid.UUID) -> None:
        result = await db.execute(
            sa.update(self.model)
            .where(self.id_column == target_id)
            .values({self.hidden_column: False, self.hidden_at_column: None})
        )
        if result.rowcount == 0:
            raise TargetNotFoundError()

    async def delete(self, db: AsyncSession, target_id: uuid.UUID) -> None:
        result = await db.execute(sa.delete(self.model).where(self.id_column == target_id))
        if result.rowcount == 0:
            raise TargetNotFoundError()

    async def list_hidden(self, db: AsyncSession, limit: int, offset: int) -> list[Any]:
        """Hidden rows with their owner, most recently hidden first."""
        result = await db.execute(
            sa.select(self.model, User)
            .join(User, User.id == self.owner_column)
            .where(self.hidden_column.is_(True))
            .order_by(self.hidden_at_column.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.tuples().all())

    def describe(self, row: Any) -> str:
        return getattr(row, "content", "") or ""


class PostTarget(ModerationTarget):
    async def delete(self, db: AsyncSession, target_id: uuid.UUID) -> None:
        try:
            await delete_post(target_id, db)
        except PostNotFoundError as exc:
            raise TargetNotFoundError() from exc


class EventTarget(ModerationTarget):
    def describe(self, row: Event) -> str:
        return f"{row.title}: {row.description}" if row.description else row.title


class ShopTarget(ModerationTarget):
    def describe(self, row: Shop) -> str:
        return f"{row.name} ({row.address})"


class ReviewTarget(ModerationTarget):
    def describe(self, row: ShopReview) -> str:
        return row.content or "(no comment)"


class AccountTarget(ModerationTarget):
    async def delete(self, db: AsyncSession, target_id: uuid.UUID) -> None:
        # Accounts are suspended; their content and history stay in place.
        await self.get_owner_id(db, target_id)
        await self.hide(db, target_id)

    async def list_hidden(self, db: AsyncSession, limit: int, offset: int) -> list[Any]:
        # The account is its own owner
        result = await db.execute(
            sa.select(User)
            .where(User.is_suspended.is_(True))
            .order_by(User.suspended_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return [(user, user) for user in result.scalars().all()]

    def describe(self, row: User) -> str:
        return row.nickname


REGISTRY: dict[ReportTargetType, ModerationTarget] = {
    ReportTargetType.POST: PostTarget(
        ReportTargetType.POST, "Post",
        Post, Post.post_id, Post.user_id, Post.is_hidden, Post.hidden_at,
    ),
    ReportTargetType.COMMENT: ModerationTarget(
        ReportTargetType.COMMENT, "Comment",
        Comment, Comment.comment_id, Comment.user_id, Comment.is_hidden, Comment.hidden_at,
    ),
    ReportTargetType.EVENT: EventTarget(
        ReportTargetType.EVENT, "Event",
        Event, Event.event_id, Event.created_by, Event.is_hidden, Event.hidden_at,
    ),
    ReportTargetType.SHOP: ShopTarget(
        ReportTargetType.SHOP, "Bonsai shop",
        Shop, Shop.shop_id, Shop.created_by, Shop.is_hidden, Shop.hidden_at,
    ),
    ReportTargetType.REVIEW: ReviewTarget(
        ReportTargetType.REVIEW, "Review",
        ShopReview, ShopReview.review_id, ShopReview.user_id,
        ShopReview.is_hidden, ShopReview.hidden_at,
    ),
    ReportTargetType.USER: AccountTarget(
        ReportTargetType.USER, "User",
        User, User.id, User.id, User.is_suspended, User.suspended_at,
    ),
}

# Variants that appear in the hidden-content queue
CONTENT_TYPES: tuple[ReportTargetType, ...] = (
    ReportTargetType.POST,
    ReportTargetType.COMMENT,
    ReportTargetType.EVENT,
    ReportTargetType.SHOP,
    ReportTargetType.REVIEW,
)


def get_target(target_type: ReportTargetType) -> ModerationTarget:
    return REGISTRY[target_type]
