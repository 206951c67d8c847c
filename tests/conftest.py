"""Pytest configuration and fixtures for the Storerate API test suite.

Provides:
- A fresh SQLite database per test (foreign keys on, so cascades apply)
- Database session override for the app
- Real bearer tokens for authenticated requests
- Disabled rate limiting
- Model factory fixtures for User, Store and Rating
"""

import os

# Cheap hashes for tests; must be set before storerate reads its settings.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storerate.core.database import build_engine, build_session_maker, get_async_session
from storerate.core.rate_limit import limiter
from storerate.core.security import create_access_token, hash_password
from storerate.main import app
from storerate.models import Base, Rating, Store, User, UserRole

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TEST_PASSWORD = "Secret#Pass1"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A throwaway SQLite database with the full schema."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'storerate_test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for test setup and assertions, separate from request sessions."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the per-test database. Auth is NOT overridden."""

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as s:
            try:
                yield s
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build an Authorization header carrying a real session token for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


# ---------------------------------------------------------------------------
# Model Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates User instances in the test database."""

    async def _create(
        *,
        name: str = "Test User Full Name Here",
        email: str | None = None,
        password: str = TEST_PASSWORD,
        address: str = "42 Test Street, Testville",
        role: UserRole = UserRole.NORMAL_USER,
    ) -> User:
        user = User(
            name=name,
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            password=hash_password(password),
            address=address,
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def store_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates Store instances. Does not change the owner's role."""

    async def _create(
        *,
        owner_id: uuid.UUID | None = None,
        name: str = "Corner Grocery And Deli",
        email: str | None = None,
        address: str = "7 Market Square",
    ) -> Store:
        store = Store(
            name=name,
            email=email or f"store-{uuid.uuid4().hex[:8]}@example.com",
            address=address,
            owner_id=owner_id,
        )
        db_session.add(store)
        await db_session.commit()
        await db_session.refresh(store)
        return store

    return _create


@pytest.fixture
def rating_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates Rating instances."""

    async def _create(*, user_id: uuid.UUID, store_id: uuid.UUID, rating: int = 4) -> Rating:
        row = Rating(user_id=user_id, store_id=store_id, rating=rating)
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return _create


# ---------------------------------------------------------------------------
# Ready-made users
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def admin(user_factory: Callable[..., Any]) -> User:
    return await user_factory(name="Platform Administrator Account", role=UserRole.SYSTEM_ADMIN)


@pytest_asyncio.fixture
async def normal_user(user_factory: Callable[..., Any]) -> User:
    return await user_factory(name="Regular Shopper Account Name")


@pytest_asyncio.fixture
async def owner(user_factory: Callable[..., Any]) -> User:
    return await user_factory(name="Store Owner Account Name", role=UserRole.STORE_OWNER)
