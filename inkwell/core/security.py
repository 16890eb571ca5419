"""
Session token issuing / verification (JWT) and password hashing (bcrypt).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from inkwell.core.config import settings
from inkwell.core.exceptions import (ConfigurationError, ExpiredTokenError,
                                     InvalidTokenError)
from inkwell.schemas.token import TokenClaims

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── Session tokens ──────────────────────────────────────────────────
def _secret_key() -> str:
    # Read on every call so a reconfigured process never signs with a stale key.
    if not settings.SECRET_KEY:
        raise ConfigurationError("SECRET_KEY is not configured")
    return settings.SECRET_KEY


def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def issue(account_id: int, role: str, now: datetime | None = None) -> str:
    """Sign a session token for *account_id* carrying its *role*.

    ``now`` defaults to the current UTC time and sets the ``iat`` claim;
    the token expires one lifetime later.
    """
    secret = _secret_key()
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": str(account_id),
        "role": role,
        "iat": issued_at,
        "exp": issued_at + token_lifetime(),
    }
    return jwt.encode(claims, secret, algorithm=settings.ALGORITHM)


def verify(token: str) -> TokenClaims:
    """Check signature and expiry of *token* and return its claims.

    Raises ``ExpiredTokenError`` once the lifetime has elapsed and
    ``InvalidTokenError`` for anything else that does not check out.
    The role claim is returned as signed; it is not re-read from the store.
    """
    secret = _secret_key()
    if not token:
        raise InvalidTokenError("Token is empty")
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as exc:
        raise ExpiredTokenError("Token has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    try:
        return TokenClaims(
            account_id=int(payload["sub"]),
            role=payload["role"],
            iat=payload["iat"],
            exp=payload["exp"],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Malformed token payload") from exc
