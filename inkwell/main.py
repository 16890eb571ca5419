"""
Inkwell — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from inkwell.api.v1.api import api_router
from inkwell.api.v1.endpoints.auth import limiter
from inkwell.core.config import settings
from inkwell.core.exceptions import ConfigurationError, register_exception_handlers
from inkwell.core.security import get_password_hash
from inkwell.db.base import Base
from inkwell.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from inkwell.models.post import Post  # noqa: F401
from inkwell.models.user import ROLE_ADMIN, User
from inkwell.schemas.common import HealthResponse

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def check_configuration() -> None:
    """Refuse to serve without a signing key."""
    if not settings.SECRET_KEY:
        raise ConfigurationError(
            "SECRET_KEY is not set; configure it in the environment or .env file"
        )


async def seed_admin() -> None:
    """Create the first admin account when configured and not yet present."""
    if not (settings.FIRST_ADMIN_EMAIL and settings.FIRST_ADMIN_PASSWORD):
        return
    email = settings.FIRST_ADMIN_EMAIL.strip().lower()
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none() is None:
            session.add(
                User(
                    name="Administrator",
                    email=email,
                    hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                    role=ROLE_ADMIN,
                )
            )
            await session.commit()
            logger.info("Default admin created: %s (password: <redacted>)", email)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    check_configuration()

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    await seed_admin()

    logger.info("Inkwell v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Multi-user blogging API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # slowapi looks the limiter up on app.state
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @application.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=settings.VERSION)

    return application


app = create_app()
