"""Predicate builders that fold visibility rules into list queries."""

from collections.abc import Collection, Iterable
from typing import Any, Callable, TypeVar
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import InstrumentedAttribute

from app.models.comment import Comment
from app.models.event import Event
from app.models.post import Post
from app.models.shop import Shop, ShopReview
from app.models.user import User

T = TypeVar("T")


def visible_posts() -> sa.ColumnElement[bool]:
    return Post.is_hidden.is_(False)


def visible_comments() -> sa.ColumnElement[bool]:
    return Comment.is_hidden.is_(False)


def visible_events() -> sa.ColumnElement[bool]:
    return Event.is_hidden.is_(False)


def visible_shops() -> sa.ColumnElement[bool]:
    return Shop.is_hidden.is_(False)


def visible_reviews() -> sa.ColumnElement[bool]:
    return ShopReview.is_hidden.is_(False)


def not_suspended_users() -> sa.ColumnElement[bool]:
    return User.is_suspended.is_(False)


def apply_exclusion(
    stmt: sa.Select, column: InstrumentedAttribute, excluded: Collection[UUID]
) -> sa.Select:
    """Drop rows whose *column* is in *excluded*; no-op for an empty set."""
    if not excluded:
        return stmt
    return stmt.where(column.not_in(list(excluded)))


def order_by_ids(rows: Iterable[T], ordered_ids: list[UUID], key: Callable[[T], Any]) -> list[T]:
    """Re-order hydrated rows to match a ranked id list.

    Ids with no matching row (deleted or filtered out between the ranking
    query and hydration) are skipped.
    """
    by_id = {key(row): row for row in rows}
    return [by_id[i] for i in ordered_ids if i in by_id]
