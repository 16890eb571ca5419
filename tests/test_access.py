"""Tests for the access control gate."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from inkwell.api.v1.access import (ADMIN, AUTHENTICATED, OWNER_OR_ADMIN,
                                   PUBLIC, Requirement, authorize,
                                   extract_bearer_token)
from inkwell.core.exceptions import AuthenticationError, AuthorizationError
from inkwell.core.security import issue
from inkwell.schemas.token import TokenClaims
from tests.conftest import API

NOW = datetime.now(timezone.utc)


def _claims(account_id: int, role: str = "user") -> TokenClaims:
    return TokenClaims(account_id=account_id, role=role, iat=NOW, exp=NOW + timedelta(hours=1))


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        (None, ""),
        ("", ""),
        ("Bearer", ""),
        ("Basic dXNlcjpwdw==", ""),
        ("abc.def.ghi", ""),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_public_needs_no_claims():
    authorize(PUBLIC, None)


def test_authenticated_requires_claims():
    with pytest.raises(AuthenticationError):
        authorize(AUTHENTICATED, None)
    authorize(AUTHENTICATED, _claims(1))


def test_admin_role_requirement():
    with pytest.raises(AuthorizationError) as exc_info:
        authorize(ADMIN, _claims(1, "user"))
    assert exc_info.value.message == "Forbidden: Admins only"
    authorize(ADMIN, _claims(1, "admin"))
    assert str(ADMIN) == "role:admin"


def test_custom_role_requirement():
    editors = Requirement.for_role("user")
    authorize(editors, _claims(1, "user"))
    with pytest.raises(AuthorizationError):
        authorize(editors, _claims(1, "admin"))


def test_owner_or_admin():
    authorize(OWNER_OR_ADMIN, _claims(5), owner_id=5)
    authorize(OWNER_OR_ADMIN, _claims(9, "admin"), owner_id=5)
    with pytest.raises(AuthorizationError):
        authorize(OWNER_OR_ADMIN, _claims(6), owner_id=5)
    with pytest.raises(AuthenticationError):
        authorize(OWNER_OR_ADMIN, None, owner_id=5)


def test_claims_is_admin():
    assert _claims(1, "admin").is_admin
    assert not _claims(1, "user").is_admin


@pytest.mark.asyncio
async def test_missing_malformed_and_expired_tokens_look_the_same(async_client: AsyncClient, alice):
    expired = issue(alice.id, alice.role, now=NOW - timedelta(minutes=61))
    headers_list = [
        {},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer garbage"},
        {"Authorization": f"Bearer {expired}"},
    ]
    bodies = []
    for headers in headers_list:
        resp = await async_client.get(f"{API}/profile", headers=headers)
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
        bodies.append(resp.json())
    assert all(body == {"message": "Unauthorized: Invalid or expired token"} for body in bodies)


@pytest.mark.asyncio
async def test_role_claim_is_trusted_until_expiry(async_client: AsyncClient, alice):
    """The gate does not re-read the role from the store."""
    stale_admin = {"Authorization": f"Bearer {issue(alice.id, 'admin')}"}
    resp = await async_client.get(f"{API}/users", headers=stale_admin)
    assert resp.status_code == 200
