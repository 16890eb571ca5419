"""Pydantic schemas for session tokens."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from inkwell.models.user import ROLE_ADMIN


class TokenClaims(BaseModel):
    """Decoded session token payload."""

    account_id: int
    role: str
    iat: datetime
    exp: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
