from functools import lru_cache

from fastapi import Request
from redis.asyncio import Redis

from app.config import Settings
from shared.auth.dependencies import (
    get_current_user_optional,
    get_current_user_required,
    require_roles,
)
from shared.constants import MODERATION_ROLES

__all__ = [
    "get_current_user",
    "get_optional_user",
    "get_redis",
    "get_settings",
    "require_admin",
]


@lru_cache
def get_settings() -> Settings:
    return Settings()


get_current_user = get_current_user_required
get_optional_user = get_current_user_optional
require_admin = require_roles(*MODERATION_ROLES)


def get_redis(request: Request) -> Redis | None:
    """Redis client from app state; None when the cache is not configured."""
    return getattr(request.app.state, "redis", None)
