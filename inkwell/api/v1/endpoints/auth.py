"""
Auth endpoints — public registration & login.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.v1.deps import get_db
from inkwell.core.config import settings
from inkwell.core.exceptions import AuthenticationError, ConflictError
from inkwell.core.security import get_password_hash, issue, verify_password
from inkwell.models.user import ROLE_USER, User
from inkwell.schemas.user import (LoginRequest, LoginResponse, RegisterRequest,
                                  UserEnvelope, UserRead)

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid credentials"


async def email_in_use(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    """Pre-check for a duplicate email; the unique index is the final word."""
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    """Commit, mapping a unique-index violation that raced past the pre-check to 409."""
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Unique constraint rejected write: %s", exc.orig)
        raise ConflictError(message) from exc


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> UserEnvelope:
    """Create a new account with the ``user`` role."""
    if await email_in_use(db, body.email):
        raise ConflictError(EMAIL_TAKEN)

    user = User(
        name=body.name,
        email=body.email,
        hashed_password=get_password_hash(body.password),
        role=ROLE_USER,
    )
    db.add(user)
    await commit_or_conflict(db, EMAIL_TAKEN)
    await db.refresh(user)
    logger.info("Registered account %d (%s)", user.id, user.email)
    return UserEnvelope(message="User registered successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange email + password for a session token.

    Unknown email and wrong password produce the same response so the
    endpoint cannot be used to discover which emails are registered.
    """
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login for %s from %s", body.email, get_remote_address(request))
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = issue(user.id, user.role)
    return LoginResponse(
        message="Logged in successfully",
        token=token,
        user=UserRead.model_validate(user),
    )
