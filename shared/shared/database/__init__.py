from shared.database.postgres import Base, get_async_engine, make_session_factory
from shared.database.redis_client import (
    cache_delete,
    cache_get_json,
    cache_set_json,
    get_redis_client,
)

__all__ = [
    "Base",
    "get_async_engine",
    "make_session_factory",
    "cache_delete",
    "cache_get_json",
    "cache_set_json",
    "get_redis_client",
]
