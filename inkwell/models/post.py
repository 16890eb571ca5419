"""
Post model (authored articles).
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from inkwell.db.base import Base
from inkwell.models.user import utcnow


class Post(Base):
    __tablename__ = "posts"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(300), nullable=False)  # type: ignore[assignment]
    content: str = Column(Text, nullable=False)  # type: ignore[assignment]
    # Plain column, no FK: deleting an account leaves its posts in place.
    author_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    author = relationship(
        "User",
        primaryjoin="foreign(Post.author_id) == User.id",
        viewonly=True,
        lazy="raise",
    )
