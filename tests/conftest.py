"""
Shared test fixtures for the Inkwell test suite.

Every test that talks to the app gets its own in-memory aiosqlite database,
wired into the app by overriding the ``get_db`` dependency.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inkwell.api.v1.deps import get_db
from inkwell.core.security import get_password_hash, issue
from inkwell.db.base import Base
from inkwell.db.session import build_engine, build_session_factory
from inkwell.main import app
from inkwell.models.user import ROLE_ADMIN, ROLE_USER, User

API = "/api/v1"
PASSWORD = "secret123"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test; tables created up front, engine disposed after."""
    test_engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(test_engine)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await test_engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Accounts ────────────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert an account directly, bypassing the register endpoint."""

    async def _make(email: str, role: str = ROLE_USER, name: str | None = None) -> User:
        user = User(
            name=name or email.split("@")[0],
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue(user.id, user.role)}"}


@pytest.fixture
async def alice(make_user) -> User:
    return await make_user("alice@example.com")


@pytest.fixture
async def bob(make_user) -> User:
    return await make_user("bob@example.com")


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("admin@example.com", role=ROLE_ADMIN)
