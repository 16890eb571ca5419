"""
Access control gate: one declarative authorization check for every route.

Routes declare what they need instead of re-implementing role checks::

    gate: AccessGate = Depends(require(AUTHENTICATED))
    gate: AccessGate = Depends(require_role(ROLE_ADMIN))

``OWNER_OR_ADMIN`` is deferred: the handler loads the resource first and
then calls ``gate.check(owner_id=...)``, so a missing resource is reported
as 404 before the token is looked at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from inkwell.core.exceptions import (AuthenticationError, AuthorizationError,
                                     TokenError)
from inkwell.core.security import verify
from inkwell.models.user import ROLE_ADMIN
from inkwell.schemas.token import TokenClaims

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requirement:
    kind: str
    role: str | None = None

    @classmethod
    def for_role(cls, role: str) -> "Requirement":
        return cls("role", role)

    def __str__(self) -> str:
        return f"role:{self.role}" if self.kind == "role" else self.kind


PUBLIC = Requirement("public")
AUTHENTICATED = Requirement("authenticated")
OWNER_OR_ADMIN = Requirement("owner-or-admin")
ADMIN = Requirement.for_role(ROLE_ADMIN)


# ── Token extraction ────────────────────────────────────────────────
def extract_bearer_token(authorization: str | None) -> str:
    """Return the token of a ``Bearer <token>`` header, or ``""``."""
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def authenticate(request: Request) -> TokenClaims:
    """Verify the request's bearer token; token errors propagate unchanged."""
    return verify(extract_bearer_token(request.headers.get("Authorization")))


# ── Policy ──────────────────────────────────────────────────────────
def authorize(
    requirement: Requirement,
    claims: TokenClaims | None,
    owner_id: int | None = None,
) -> None:
    """Raise if *claims* do not satisfy *requirement*."""
    if requirement == PUBLIC:
        return
    if claims is None:
        raise AuthenticationError()

    if requirement.kind == "role" and claims.role != requirement.role:
        if requirement.role == ROLE_ADMIN:
            raise AuthorizationError("Forbidden: Admins only")
        raise AuthorizationError(f"Forbidden: {requirement.role} role required")

    if requirement == OWNER_OR_ADMIN:
        if claims.account_id != owner_id and not claims.is_admin:
            raise AuthorizationError()


class AccessGate:
    """Per-request handle on the caller's identity."""

    def __init__(self, request: Request, requirement: Requirement):
        self._request = request
        self.requirement = requirement
        self._claims: TokenClaims | None = None

    @property
    def claims(self) -> TokenClaims:
        if self._claims is None:
            raise AuthenticationError()
        return self._claims

    def _authenticate(self) -> TokenClaims:
        if self._claims is None:
            try:
                self._claims = authenticate(self._request)
            except TokenError as exc:
                # Expired and malformed look the same from the outside.
                logger.debug("Rejected token on %s: %s", self._request.url.path, exc)
                raise AuthenticationError() from exc
        return self._claims

    def check(self, owner_id: int | None = None) -> TokenClaims | None:
        if self.requirement == PUBLIC:
            return None
        claims = self._authenticate()
        authorize(self.requirement, claims, owner_id=owner_id)
        return claims


def require(requirement: Requirement):
    """FastAPI dependency factory enforcing *requirement*."""

    async def dependency(request: Request) -> AccessGate:
        gate = AccessGate(request, requirement)
        if requirement != OWNER_OR_ADMIN:
            gate.check()
        return gate

    dependency.__name__ = f"require_{str(requirement).replace(':', '_').replace('-', '_')}"
    return dependency


def require_role(role: str):
    return require(Requirement.for_role(role))
