"""Pytest configuration and shared fixtures.

This module provides:
- An in-memory SQLite database per test (schema from the ORM models)
- Async session fixtures for repository/service tests
- FastAPI app and HTTP client fixtures sharing the test session
- Signed access tokens for super admin and non-admin callers
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-the-admin-api")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
from core.security import create_access_token
from core.wide_event import init_wide_event
from models import User, UserRole
from tests.factories import SuperAdminFactory, create_async, token_for

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def setup_wide_event():
    """Initialize wide_event context for all tests.

    Services use set_wide_event_fields() which requires context initialization.
    In production this is done by middleware; in tests we do it here.
    """
    init_wide_event()
    yield


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide a database session for each test."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def app(
    test_engine: AsyncEngine, db_session: AsyncSession
) -> AsyncGenerator[FastAPI]:
    """The application wired to the test session.

    Requests share ``db_session`` with the test, so rows created by
    factories are visible to handlers and handler writes are visible to
    assertions without a commit.
    """
    from main import app as fastapi_app

    async def _override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session
        await db_session.flush()

    fastapi_app.state.engine = test_engine
    fastapi_app.state.init_done = True
    fastapi_app.state.init_error = None
    fastapi_app.dependency_overrides[get_db] = _override_get_db

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Unauthenticated async HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await create_async(SuperAdminFactory, db_session)


@pytest.fixture
def admin_headers(super_admin: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(super_admin)}"}


@pytest_asyncio.fixture
async def admin_client(
    app: FastAPI, admin_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient]:
    """Client carrying a valid SUPER_ADMIN bearer token."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=admin_headers,
    ) as ac:
        yield ac


@pytest.fixture
def customer_token() -> str:
    return create_access_token(
        user_id="customer-1",
        email="customer@example.com",
        role=UserRole.CUSTOMER.value,
        name="Customer",
    )
