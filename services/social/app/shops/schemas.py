from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from app.schemas import UserRef


class ShopSummary(BaseModel):
    shop_id: uuid.UUID
    name: str
    address: str
    creator: UserRef
    created_at: datetime


class ReviewItem(BaseModel):
    review_id: uuid.UUID
    rating: int
    content: str | None = None
    author: UserRef
    created_at: datetime


class ShopDetail(ShopSummary):
    average_rating: float | None = None
    reviews: list[ReviewItem]
