"""
Inkwell Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite +
       StaticPool, foreign keys on) and, for endpoint tests, an app built by
       create_app() whose session dependency points at that database.

Fixture Hierarchy (all function-scoped):
    test_settings
    ├── token_service: TokenService bound to the test secret
    └── engine: in-memory database with all tables created
        ├── session_factory
        │   ├── db_session:  a session for service-level tests
        │   └── app:         create_app(test_settings) + get_db_session override
        │       └── test_client: HTTPX AsyncClient over ASGITransport
        │           └── register_user: POST /users/register, returns (id, token)
    mock_db_session: AsyncMock session for error-path unit tests
"""

import os

# Override settings for testing BEFORE any app imports, so the module-level
# settings and app are built from these values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost keeps hashing fast
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from typing import AsyncGenerator, Callable, Tuple  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models  # noqa: E402,F401  (registers every table on Base.metadata)
from app.config import Settings  # noqa: E402
from app.database import Base, enable_sqlite_foreign_keys, get_db_session  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.token_service import TokenService  # noqa: E402


TEST_SECRET = os.environ["JWT_SECRET_KEY"]


# ══════════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    """Explicit configuration handed to create_app() and TokenService."""
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
        rate_limit_requests=10000,
    )


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService(test_settings)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    A private in-memory database for one test.

    StaticPool keeps a single connection alive, so every session in the
    test sees the same in-memory database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for calling services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_list_users_db_error(mock_db_session):
            mock_db_session.execute.side_effect = SQLAlchemyError("boom")
            with pytest.raises(DatabaseError):
                await service.list_users(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(test_settings, session_factory):
    """
    The full application (middleware, handlers, routers) on the test database.

    The override keeps get_db_session's commit-on-success and
    rollback-on-error behavior.
    """
    application = create_app(test_settings)

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def register_user(test_client, token_service) -> Callable:
    """
    Register a user over HTTP and return (user_id, token).

    Usage:
        user_id, token = await register_user("Ann", "ann@example.com")
    """

    async def _register(
        name: str, email: str, password: str = "secret123"
    ) -> Tuple[int, str]:
        response = await test_client.post(
            "/users/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        token = response.json()["token"]
        return token_service.verify(token), token

    return _register
