"""
Profile endpoints for the caller's own account and posts.

Every route acts on the account id carried by the token; there is no way
to address another account from here.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.v1.access import AUTHENTICATED, AccessGate, require
from inkwell.api.v1.deps import get_db
from inkwell.api.v1.endpoints.auth import commit_or_conflict, email_in_use
from inkwell.api.v1.endpoints.posts import post_query
from inkwell.core.exceptions import ConflictError, NotFoundError
from inkwell.core.security import get_password_hash
from inkwell.models.post import Post
from inkwell.models.user import User
from inkwell.schemas.post import PostRead
from inkwell.schemas.user import ProfileUpdate, UserEnvelope, UserRead

router = APIRouter(prefix="/profile", tags=["profile"])
logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email is already in use"


async def _get_self(db: AsyncSession, gate: AccessGate) -> User:
    result = await db.execute(select(User).where(User.id == gate.claims.account_id))
    user = result.scalar_one_or_none()
    if user is None:
        # Token outlived its account.
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=UserRead)
async def read_profile(
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(AUTHENTICATED)),
) -> User:
    return await _get_self(db, gate)


@router.put("", response_model=UserEnvelope)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(AUTHENTICATED)),
) -> UserEnvelope:
    user = await _get_self(db, gate)

    if body.email is not None and body.email != user.email:
        if await email_in_use(db, body.email, exclude_id=user.id):
            raise ConflictError(EMAIL_IN_USE)
        user.email = body.email
    if body.name is not None:
        user.name = body.name
    if body.password is not None:
        user.hashed_password = get_password_hash(body.password)

    await commit_or_conflict(db, EMAIL_IN_USE)
    await db.refresh(user)
    logger.info("Account %d updated its profile", user.id)
    return UserEnvelope(message="Profile updated successfully", user=UserRead.model_validate(user))


@router.get("/posts", response_model=list[PostRead])
async def my_posts(
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(AUTHENTICATED)),
) -> list[Post]:
    result = await db.execute(post_query().where(Post.author_id == gate.claims.account_id))
    return list(result.scalars().all())
