"""Shared test configuration and fixtures.

Each test gets a fresh schema on its own database and a session wrapped in a
transaction that rolls back afterwards:
- ``TEST_DATABASE_URL`` selects the database (e.g. a PostgreSQL/asyncpg URL in
  CI); by default every test uses a temporary SQLite file via aiosqlite.
- Pure pricing tests need none of these fixtures.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, timedelta

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./venuehub_test.db")
os.environ.setdefault("BOOKING_SWEEP_INTERVAL_SECONDS", "0")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from app.auth.security import create_access_token, hash_password
from app.database import Base, get_db
from app.main import app
from app.models.user import User

# ---------------------------------------------------------------------------
# Test database
# ---------------------------------------------------------------------------


@pytest.fixture
def test_db_url(tmp_path) -> str:
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def test_engine(test_db_url: str):
    """Create the schema on a per-test engine and drop it afterwards."""
    engine = create_async_engine(test_db_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


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
# Convenience fixtures: authenticated users
# ---------------------------------------------------------------------------


async def _make_user(db_session: AsyncSession, role: str, name: str) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        is_active=True,
        role=role,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def _headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "host", "Test Host")


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "guest", "Test Guest")


@pytest_asyncio.fixture
async def other_guest_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "guest", "Second Guest")


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return _headers(host_user)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return _headers(guest_user)


@pytest_asyncio.fixture
async def other_guest_headers(other_guest_user: User) -> dict[str, str]:
    return _headers(other_guest_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: listings
# ---------------------------------------------------------------------------

# Open 08:00-20:00 on weekdays, closed on weekends
WEEKDAY_HOURS = {
    day: {"start": "08:00", "end": "20:00", "closed": False}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
} | {
    "saturday": {"start": "00:00", "end": "00:00", "closed": True},
    "sunday": {"start": "00:00", "end": "00:00", "closed": True},
}


@pytest_asyncio.fixture
async def test_listing(client: AsyncClient, host_headers: dict) -> dict:
    """Create and return a weekday listing via the API."""
    response = await client.post(
        "/api/v1/listings",
        json={
            "title": "Loft Studio",
            "description": "Daylight studio for shoots and workshops.",
            "location": "Brooklyn, NY",
            "capacity": 20,
            "hourly_rate": "50.00",
            "min_hours": 2,
            "max_hours": 12,
            "included_guests": 10,
            "extra_guest_charge": "5.00",
            "operating_hours": WEEKDAY_HOURS,
        },
        headers=host_headers,
    )
    assert response.status_code == 201, f"Failed to create test listing: {response.text}"
    return response.json()


def _upcoming(weekday: int) -> date:
    """The first ``weekday`` at least a week from today."""
    start = date.today() + timedelta(days=7)
    return start + timedelta(days=(weekday - start.weekday()) % 7)


@pytest.fixture
def next_monday() -> date:
    return _upcoming(0)


@pytest.fixture
def next_saturday() -> date:
    return _upcoming(5)
