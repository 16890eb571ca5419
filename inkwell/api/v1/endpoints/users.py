"""
Account management endpoints. Admin role required on every route.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.v1.access import require_role
from inkwell.api.v1.deps import get_db
from inkwell.api.v1.endpoints.auth import commit_or_conflict, email_in_use
from inkwell.core.exceptions import ConflictError, NotFoundError
from inkwell.models.user import ROLE_ADMIN, User
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.user import AdminUserUpdate, UserEnvelope, UserRead

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_role(ROLE_ADMIN))],
)
logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email is already in use"


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=list[UserRead])
async def list_users(db: AsyncSession = Depends(get_db)) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)) -> User:
    return await _get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: int,
    body: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
) -> UserEnvelope:
    user = await _get_user_or_404(db, user_id)

    if body.email is not None and body.email != user.email:
        if await email_in_use(db, body.email, exclude_id=user.id):
            raise ConflictError(EMAIL_IN_USE)
        user.email = body.email
    if body.name is not None:
        user.name = body.name
    if body.role is not None:
        # Tokens already issued keep their old role claim until they expire.
        user.role = body.role

    await commit_or_conflict(db, EMAIL_IN_USE)
    await db.refresh(user)
    logger.info("Admin updated account %d (role=%s)", user.id, user.role)
    return UserEnvelope(message="User updated successfully", user=UserRead.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Delete an account. Its posts are kept and resolve to an unknown author."""
    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("Admin deleted account %d (%s)", user_id, user.email)
    return MessageResponse(message="User deleted successfully")
