"""
Shared test fixtures for Devfolio API tests.

Provides database session management, the test client, and fake GitHub /
web page transports.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from devfolio.config import settings
from devfolio.database import Base, get_db
from devfolio.main import app
from devfolio.middleware.rate_limit import reset_limiter
from devfolio.services.github import GitHubClient, get_github_client
from devfolio.services.metadata import MetadataFetcher, get_metadata_fetcher

# Import models so they're registered with Base.metadata before table creation
from devfolio import models  # noqa: F401

# Test database URL (uses separate test database)
TEST_DATABASE_URL = settings.test_database_url

# Create test engine with NullPool to avoid connection issues
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


# --- Rate Limiter Reset Fixture ---


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test to ensure test isolation."""
    reset_limiter()
    yield


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create tables before each test function, drop after.
    Provides isolated database state per test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client configured for testing.
    Overrides database dependency with test session.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Outbound HTTP Fixtures ---


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def github_transport():
    """
    Factory fixture installing a fake GitHub behind the GitHub client dependency.

    Usage:
        transport = github_transport(handler)
    """

    def _install(handler: Handler) -> RecordingTransport:
        transport = RecordingTransport(handler)
        app.dependency_overrides[get_github_client] = lambda: GitHubClient(transport=transport)
        return transport

    yield _install
    app.dependency_overrides.pop(get_github_client, None)


@pytest.fixture
def page_transport():
    """Factory fixture installing a fake web behind the metadata fetcher dependency."""

    def _install(handler: Handler) -> RecordingTransport:
        transport = RecordingTransport(handler)
        app.dependency_overrides[get_metadata_fetcher] = lambda: MetadataFetcher(transport=transport)
        return transport

    yield _install
    app.dependency_overrides.pop(get_metadata_fetcher, None)


# --- Payload Fixtures ---


@pytest.fixture
def user_data() -> dict[str, Any]:
    """Mirrored GitHub profile as the dashboard sends it."""
    return {
        "id": 1001,
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "githubUsername": "ada",
        "avatarUrl": "https://avatars.example.com/ada.png",
        "bio": "Analytical engines",
        "location": "London",
        "websiteUrl": "https://ada.dev",
        "twitterUsername": "ada_l",
        "company": "Engines Ltd",
        "publicRepos": 12,
        "followers": 340,
        "following": 5,
    }


@pytest.fixture
def portfolio_data() -> dict[str, str]:
    return {
        "displayName": "Ada L.",
        "jobTitle": "Engineer",
        "bio": "I build engines.",
        "profilePic": "https://avatars.example.com/ada.png",
        "customUsername": "ada-builds",
    }


@pytest.fixture
def repo_record():
    """Factory fixture for repository records in the dashboard's shape."""

    def _repo_record(external_id: int, name: str | None = None, **overrides: Any) -> dict[str, Any]:
        name = name or f"repo-{external_id}"
        record = {
            "id": external_id,
            "name": name,
            "fullName": f"ada/{name}",
            "description": f"{name} description",
            "htmlUrl": f"https://github.com/ada/{name}",
            "homepage": "",
            "language": "Python",
            "stargazersCount": 3,
            "forksCount": 1,
            "isPrivate": False,
            "isFork": False,
            "size": 120,
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-06-01T00:00:00Z",
            "pushedAt": "2024-06-02T00:00:00Z",
        }
        record.update(overrides)
        return record

    return _repo_record


@pytest.fixture
def frozen_time():
    """
    Fixture for time-based testing using freezegun.

    Usage:
        with frozen_time("2026-02-01 12:00:00"):
            # time is frozen
    """
    from freezegun import freeze_time

    return freeze_time
