"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- In-memory SQLite database, created fresh for each test
- Redis client (in-memory fake)
- Exchange-rate service backed by a mocked upstream API
- HTTP client with dependency overrides
- Base data fixtures (users, auth headers)
"""

import os
from datetime import date
from typing import AsyncGenerator

import httpx
import pytest
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ACCESS_LOG_ENABLED"] = "false"

from agencydesk.main import app
from agencydesk.api.dependencies import get_db, get_exchange_rate_service, get_today
from agencydesk.core.security import create_access_token
from agencydesk.db.base import Base
from agencydesk.services.exchange_rates import ExchangeRateService

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed "today" for every request served during tests
TODAY = date(2025, 6, 15)

UPSTREAM_RATES = {
    "USD": 1,
    "EUR": 0.85,
    "TRY": 32.0,
    "SAR": 3.75,
    "AED": 3.67,
    "EGP": 50.0,
    "GBP": 0.79,
}


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine():
    """
    Create an in-memory database engine with all tables.

    StaticPool keeps the single in-memory connection alive for the whole test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False  # Set to True for SQL debugging
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a DB session for each test.

    The database itself is discarded with the engine, so the code under test
    is free to commit.
    """
    session_factory = sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    session = session_factory()

    yield session

    await session.close()


# ==================== Redis ====================

@pytest.fixture(scope="function")
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """Fake Redis client (in-memory) for each test."""
    redis = FakeAsyncRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


# ==================== Exchange rates ====================

@pytest.fixture
def upstream_calls():
    """Records every request made to the mocked rate API."""
    return []


@pytest.fixture
def rates_transport(upstream_calls) -> httpx.MockTransport:
    """Mocked open.er-api.com returning UPSTREAM_RATES."""
    def handler(request: httpx.Request) -> httpx.Response:
        upstream_calls.append(request)
        return httpx.Response(200, json={"result": "success", "base_code": "USD", "rates": UPSTREAM_RATES})

    return httpx.MockTransport(handler)


@pytest.fixture
def rate_service(redis_client, rates_transport) -> ExchangeRateService:
    return ExchangeRateService(
        api_url="https://rates.test/v6/latest/USD",
        redis=redis_client,
        transport=rates_transport,
    )


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    rate_service: ExchangeRateService
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db, the exchange-rate service and the current date.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_exchange_rate_service] = lambda: rate_service
    app.dependency_overrides[get_today] = lambda: TODAY

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

def _headers_for(user) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user(db_session: AsyncSession):
    """Sales user with the role's default permissions."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="sales@example.com", role="sales")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession):
    """Admin user for testing admin-only endpoints."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(
        db_session,
        email="admin@example.com",
        name="Admin User",
        role="admin"
    )
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def viewer_user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="viewer@example.com", role="viewer")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(user):
    """Authentication headers for the sales user."""
    return _headers_for(user)


@pytest.fixture
async def admin_auth_headers(admin_user):
    """Authentication headers for the admin user."""
    return _headers_for(admin_user)


@pytest.fixture
async def viewer_auth_headers(viewer_user):
    return _headers_for(viewer_user)
