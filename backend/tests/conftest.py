"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database (e.g. a ``staybook_test``
  PostgreSQL database); without it a throwaway SQLite file is used.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from staybook.auth.jwt import create_token_pair
from staybook.auth.passwords import hash_password
from staybook.database import Base, get_db
from staybook.main import app
from staybook.models.user import ROLE_ADMIN, ROLE_USER, User


def pytest_collection_modifyitems(items):
    """Run every async test on the session event loop shared with the engine."""
    session_loop = pytest.mark.asyncio(loop_scope="session")
    for item in items:
        if pytest_asyncio.is_async_test(item):
            item.add_marker(session_loop, append=False)


# ---------------------------------------------------------------------------
# Session-scoped: engine and schema
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine(tmp_path_factory):
    """Create a session-scoped engine tied to the session event loop."""
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        url = f"sqlite+aiosqlite:///{tmp_path_factory.mktemp('db') / 'staybook_test.db'}"
    engine = create_async_engine(url, echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back.

    Service-level ``commit()`` calls do not end the outer transaction.
    """
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def session_factory(test_engine, setup_test_db) -> async_sessionmaker[AsyncSession]:
    """Independent, really-committing sessions, for tests that need concurrency."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and headers
# ---------------------------------------------------------------------------


async def make_user(
    db: AsyncSession,
    role: str = ROLE_USER,
    first_name: str = "Test",
    last_name: str = "User",
    is_active: bool = True,
) -> User:
    """Create a user directly in the DB."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        first_name=first_name,
        last_name=last_name,
        is_active=is_active,
        role=role,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def user_factory(db_session: AsyncSession):
    """Return ``make_user`` bound to the test session."""

    async def _make(**kwargs) -> User:
        return await make_user(db_session, **kwargs)

    return _make


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, first_name="Jane", last_name="Guest")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the test user."""
    return headers_for(test_user)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, first_name="Omar", last_name="Other")


@pytest_asyncio.fixture
async def other_auth_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, role=ROLE_ADMIN, first_name="Ada", last_name="Admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: property
# ---------------------------------------------------------------------------


def days_from_today(offset: int) -> date:
    return date.today() + timedelta(days=offset)


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, admin_headers: dict) -> dict:
    """Create a property open from tomorrow for 200 days at 100/night, via the API."""
    response = await client.post(
        "/api/v1/properties",
        json={
            "title": "Test Cottage",
            "description": "A quiet cottage used by the automated tests.",
            "price_per_night": "100.00",
            "available_from": days_from_today(1).isoformat(),
            "available_to": days_from_today(200).isoformat(),
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()["data"]["property"]
