"""Pydantic schemas for posts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


def _required(v: str, label: str) -> str:
    if not v.strip():
        raise ValueError(f"{label} is required")
    return v


class PostCreate(BaseModel):
    title: str
    content: str

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _required(v, "Title")

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        return _required(v, "Content")


class PostUpdate(BaseModel):
    title: str | None = None
    content: str | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return None if v is None else _required(v, "Title")

    @field_validator("content")
    @classmethod
    def _content(cls, v: str | None) -> str | None:
        return None if v is None else _required(v, "Content")


class AuthorRead(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class PostRead(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    author: AuthorRead | None  # None once the author's account is gone
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class PostEnvelope(BaseModel):
    message: str
    post: PostRead
