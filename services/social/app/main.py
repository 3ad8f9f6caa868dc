import logging
from contextlib import asynccontextmanager

logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s: %(message)s")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.database import dispose_db, init_db
from app.dependencies import get_settings
from app.events.router import router as events_router
from app.feed.router import router as feed_router
from app.moderation.router import router as moderation_router
from app.notifications.router import router as notifications_router
from app.posts.router import router as posts_router
from app.rate_limit import limiter
from app.reports.admin_router import router as reports_admin_router
from app.reports.router import router as reports_router
from app.search.router import router as search_router
from app.shops.router import router as shops_router
from app.social_graph.router import router as social_graph_router
from shared.database.redis_client import get_redis_client
from shared.middleware import (
    error_envelope_middleware,
    register_error_handlers,
    request_id_middleware,
)

logger = logging.getLogger(__name__)

# Swagger tag groups displayed in the OpenAPI docs sidebar
_OPENAPI_TAGS = [
    {
        "name": "Social graph",
        "description": (
            "Follow, block and mute. Blocking removes follow edges in both directions; "
            "follower lists are hidden from users the owner has blocked."
        ),
    },
    {
        "name": "Posts",
        "description": "Post creation and deletion with genres and hashtags; post comments.",
    },
    {
        "name": "Feed",
        "description": (
            "Timeline of followed accounts, recommended users and trending genres. "
            "Blocked, muted, suspended and hidden content is filtered out."
        ),
    },
    {
        "name": "Search",
        "description": (
            "Post, user and hashtag search. SEARCH_MODE selects plain LIKE matching "
            "or an index-backed pg_bigm / pg_trgm mode with LIKE fallback."
        ),
    },
    {
        "name": "Shops",
        "description": "Bonsai shop directory and reviews. Hidden entries are never listed.",
    },
    {"name": "Events", "description": "Community events. Hidden events are never listed."},
    {"name": "Notifications", "description": "Per-user notifications, mute and block aware."},
    {
        "name": "Reports",
        "description": (
            "Abuse reports. Targets are hidden automatically once they reach "
            "AUTO_HIDE_THRESHOLD reports."
        ),
    },
    {"name": "Admin: reports", "description": "Report review and content removal."},
    {
        "name": "Admin: moderation",
        "description": "Hidden-content queue, admin inbox and search diagnostics.",
    },
    {"name": "Health", "description": "Liveness probe."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.social_database_url)
    redis_client = get_redis_client(settings.redis_url)
    app.state.redis = redis_client
    logger.info(
        "Social service started (env=%s, search_mode=%s, auto_hide_threshold=%d)",
        settings.env_name,
        settings.search_mode.value,
        settings.auto_hide_threshold,
    )

    yield

    await redis_client.aclose()
    await dispose_db()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Bonsai Social Service",
        description=(
            "Social graph, posts, feed, search, notifications and moderation for the "
            "bonsai community."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=_OPENAPI_TAGS,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)

    # CORS must be registered first (runs last in middleware stack)
    # so that preflight OPTIONS requests get CORS headers before any auth check.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)

    app.include_router(social_graph_router, prefix="/api/v1")
    app.include_router(posts_router, prefix="/api/v1")
    app.include_router(feed_router, prefix="/api/v1")
    app.include_router(shops_router, prefix="/api/v1")
    app.include_router(events_router, prefix="/api/v1")
    app.include_router(search_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(reports_admin_router, prefix="/api/v1")
    app.include_router(moderation_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        """Lightweight liveness probe. Does not hit the database."""
        return {"status": "ok", "service": "social"}

    return app


app = create_app()
