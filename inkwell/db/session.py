"""
Async SQLAlchemy engine & session factory.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for tests and
local tinkering.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from inkwell.core.config import settings


def build_engine(url: str) -> AsyncEngine:
    engine_args: dict = {"echo": False, "pool_pre_ping": True}

    if url.startswith("postgresql"):
        engine_args.update(pool_size=20, max_overflow=10, pool_recycle=300)
    elif url.startswith("sqlite") and ":memory:" in url:
        # One shared connection, otherwise every checkout sees an empty database
        engine_args.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(url, **engine_args)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
async_session_factory = build_session_factory(engine)
