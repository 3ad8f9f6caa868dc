from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register with Base
from app.config import Settings
from app.database import get_db
from app.dependencies import get_settings
from app.main import create_app
from app.models.post import Post
from app.models.user import User
from app.rate_limit import limiter
from app.search.constants import SearchMode
from shared.auth.config import AuthSettings
from shared.auth.dependencies import get_auth_settings
from shared.constants import Role
from shared.database.postgres import Base, make_session_factory

TEST_DATABASE_URL = "sqlite+aiosqlite://"

TEST_AUTH = AuthSettings(
    secret="test-secret",
    algorithm="HS256",
    issuer="bonsai-auth",
    audience="bonsai-services",
)

# Low threshold so route tests can trip auto-hide with two reports
TEST_SETTINGS = Settings(search_mode=SearchMode.LIKE, auto_hide_threshold=2)


def make_token(user_id: UUID, roles: tuple[Role, ...] = (Role.USER,)) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {
            "sub": str(user_id),
            "roles": [r.value for r in roles],
            "iss": TEST_AUTH.issuer,
            "aud": TEST_AUTH.audience,
            "iat": now,
            "exp": now + timedelta(minutes=15),
        },
        TEST_AUTH.secret,
        algorithm=TEST_AUTH.algorithm,
    )


def auth_headers(user_id: UUID, roles: tuple[Role, ...] = (Role.USER,)) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, roles)}"}


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite/aiosqlite defer BEGIN, which breaks SAVEPOINT; take over transaction control.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = make_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(nickname: str = "bonsai_fan", **kwargs) -> User:
        user = User(nickname=nickname, **kwargs)
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


@pytest.fixture
def make_post(db_session: AsyncSession) -> Callable[..., Awaitable[Post]]:
    async def _make(author: User, content: str = "New pine repotted", **kwargs) -> Post:
        post = Post(user_id=author.id, content=content, **kwargs)
        db_session.add(post)
        await db_session.flush()
        return post

    return _make


@pytest_asyncio.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_auth_settings] = lambda: TEST_AUTH
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True


@pytest.fixture
def auth() -> Callable[..., dict[str, str]]:
    """Build bearer headers: ``auth(user.id)`` or ``auth(admin.id, (Role.ADMIN,))``."""
    return auth_headers


@pytest.fixture
def auth_settings() -> AuthSettings:
    return TEST_AUTH
