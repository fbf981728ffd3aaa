"""
Pytest fixtures for testing.

By default every test gets a fresh SQLite database file (aiosqlite). Set
TEST_WITH_POSTGRES=1 to run the same suite against PostgreSQL in a
testcontainers container.
"""
import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Settings are read when the app modules are imported; these must be set first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["DEV_MODE"] = "false"

from core.config import Settings  # noqa: E402
from models.base import Base  # noqa: E402
from services.storage import LocalObjectStorage  # noqa: E402

USE_POSTGRES = os.environ.get("TEST_WITH_POSTGRES") == "1"

# Header read by the test identity override; absent means anonymous
CALLER_HEADER = "X-Test-Caller"

OWNER_ID = "auth0|owner-user"
OTHER_ID = "auth0|other-user"

TEST_BUCKET = "prompt-manager"
TEST_PUBLIC_URL = "http://test/assets"


@pytest.fixture
def owner_id() -> str:
    """Caller id used by owner_client."""
    return OWNER_ID


@pytest.fixture
def other_id() -> str:
    """Caller id used by other_client."""
    return OTHER_ID


@pytest.fixture
def limits() -> Settings:
    """Settings with default field limits, independent of the environment."""
    return Settings(database_url="sqlite+aiosqlite://", dev_mode=False)


@pytest.fixture(scope="session")
def postgres_url() -> Generator[str]:
    """Start a PostgreSQL container for the test session."""
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
        yield postgres.get_connection_url()


@pytest.fixture
def database_url(request: pytest.FixtureRequest, tmp_path: Path) -> str:
    """Database URL for one test: a throwaway SQLite file or the shared container."""
    if USE_POSTGRES:
        return request.getfixturevalue("postgres_url")
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine with a freshly created schema."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for tests that need several independent sessions."""
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Async session shared by the test body and the app under test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path: Path) -> LocalObjectStorage:
    """Local object storage rooted in the test's temporary directory."""
    return LocalObjectStorage(tmp_path / "storage", TEST_BUCKET, TEST_PUBLIC_URL)


@pytest.fixture
async def app_overrides(
    db_session: AsyncSession,
    storage: LocalObjectStorage,
) -> AsyncGenerator[None]:
    """
    Point the app at the test session and storage, and take identity from a header.

    Token verification has its own tests in tests/core/test_auth.py.
    """
    from api.dependencies import get_object_storage
    from api.main import app
    from core.auth import get_optional_caller_id
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    async def override_get_optional_caller_id(request: Request) -> str | None:
        return request.headers.get(CALLER_HEADER)

    def override_get_object_storage() -> LocalObjectStorage:
        return storage

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_optional_caller_id] = override_get_optional_caller_id
    app.dependency_overrides[get_object_storage] = override_get_object_storage

    yield

    app.dependency_overrides.clear()


def _make_client(caller_id: str | None = None) -> AsyncClient:
    from api.main import app

    headers = {CALLER_HEADER: caller_id} if caller_id else {}
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=headers,
    )


@pytest.fixture
async def client(app_overrides: None) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """Anonymous test client."""
    async with _make_client() as test_client:
        yield test_client


@pytest.fixture
async def owner_client(app_overrides: None) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """Test client authenticated as OWNER_ID."""
    async with _make_client(OWNER_ID) as test_client:
        yield test_client


@pytest.fixture
async def other_client(app_overrides: None) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """Test client authenticated as OTHER_ID."""
    async with _make_client(OTHER_ID) as test_client:
        yield test_client
