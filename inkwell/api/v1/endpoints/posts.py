"""
Post endpoints.

- GET operations are public.
- POST requires any authenticated account; the caller becomes the author.
- PUT / DELETE follow the ownership policy: the author or any admin.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.api.v1.access import (AUTHENTICATED, OWNER_OR_ADMIN, AccessGate,
                                   require)
from inkwell.api.v1.deps import get_db
from inkwell.core.exceptions import NotFoundError
from inkwell.models.post import Post
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.post import PostCreate, PostEnvelope, PostRead, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])
logger = logging.getLogger(__name__)


def post_query() -> Select:
    """Posts with their author resolved, newest first."""
    return (
        select(Post)
        .options(selectinload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .execution_options(populate_existing=True)
    )


async def get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    result = await db.execute(post_query().where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found")
    return post


@router.get("", response_model=list[PostRead])
async def list_posts(db: AsyncSession = Depends(get_db)) -> list[Post]:
    result = await db.execute(post_query())
    return list(result.scalars().all())


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: int, db: AsyncSession = Depends(get_db)) -> Post:
    return await get_post_or_404(db, post_id)


@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: PostCreate,
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(AUTHENTICATED)),
) -> PostEnvelope:
    post = Post(title=body.title, content=body.content, author_id=gate.claims.account_id)
    db.add(post)
    await db.commit()
    post = await get_post_or_404(db, post.id)
    logger.info("Account %d created post %d", post.author_id, post.id)
    return PostEnvelope(message="Post created successfully", post=PostRead.model_validate(post))


@router.put("/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: int,
    body: PostUpdate,
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(OWNER_OR_ADMIN)),
) -> PostEnvelope:
    post = await get_post_or_404(db, post_id)
    claims = gate.check(owner_id=post.author_id)

    # author_id is never touched by an update
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(post, field, value)

    await db.commit()
    post = await get_post_or_404(db, post_id)
    logger.info("Account %d updated post %d", claims.account_id, post_id)
    return PostEnvelope(message="Post updated successfully", post=PostRead.model_validate(post))


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
    gate: AccessGate = Depends(require(OWNER_OR_ADMIN)),
) -> MessageResponse:
    post = await get_post_or_404(db, post_id)
    claims = gate.check(owner_id=post.author_id)

    await db.delete(post)
    await db.commit()
    logger.info("Account %d deleted post %d", claims.account_id, post_id)
    return MessageResponse(message="Post deleted successfully")
