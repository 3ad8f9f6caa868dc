"""Pagination utilities for list endpoints.

Two strategies:
  - CursorPage: keyset pagination for user-facing lists. The cursor is the
    last-seen item id; the next page starts strictly after that row in
    (created_at DESC, id DESC) order.
  - OffsetPage: offset pagination for admin listings that need a total.
"""

import math
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

import sqlalchemy as sa
from pydantic import BaseModel, Field
from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")
S = TypeVar("S")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class CursorPage(BaseModel, Generic[T]):
    """Cursor-based paginated response.

    Pass `next_cursor` back as the `cursor` query parameter to fetch the next page.
    """

    items: list[T]
    next_cursor: UUID | None = Field(
        default=None,
        description="Id of the last item when a full page was returned. Null otherwise.",
    )
    has_more: bool = Field(description="True when a full page was returned.")


class OffsetPage(BaseModel, Generic[T]):
    """Offset-based paginated response for admin listings."""

    items: list[T]
    total: int = Field(description="Total number of matching records.")
    page: int = Field(description="Current page number (1-indexed).")
    page_size: int = Field(description="Number of items per page.")
    pages: int = Field(description="Total number of pages.")

    @classmethod
    def build(cls, items: list[T], total: int, page: int, page_size: int) -> "OffsetPage[T]":
        pages = max(1, math.ceil(total / page_size)) if total else 1
        return cls(items=items, total=total, page=page, page_size=page_size, pages=pages)


def apply_id_cursor(
    stmt: sa.Select,
    id_column: InstrumentedAttribute,
    created_column: InstrumentedAttribute,
    cursor: UUID | None,
    limit: int,
) -> sa.Select:
    """Order newest-first and position *stmt* strictly after the cursor row.

    An id that matches no row resolves the anchor to NULL, so every
    comparison fails and the page comes back empty.
    """
    stmt = stmt.order_by(created_column.desc(), id_column.desc()).limit(limit)
    if cursor is None:
        return stmt
    anchor = (
        sa.select(created_column)
        .where(id_column == cursor)
        .correlate(None)
        .scalar_subquery()
    )
    return stmt.where(
        sa.or_(
            created_column < anchor,
            sa.and_(created_column == anchor, id_column < cursor),
        )
    )


def next_cursor_for(items: Sequence[S], limit: int, get_id: Callable[[S], Any]) -> UUID | None:
    """Last item's id only when exactly *limit* items came back."""
    if items and len(items) == limit:
        return get_id(items[-1])
    return None


def build_cursor_page(
    items: Sequence[S],
    limit: int,
    get_id: Callable[[S], Any],
    to_schema: Callable[[S], T],
) -> CursorPage[T]:
    cursor = next_cursor_for(items, limit, get_id)
    return CursorPage(
        items=[to_schema(item) for item in items],
        next_cursor=cursor,
        has_more=cursor is not None,
    )
