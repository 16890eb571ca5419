"""End-to-end flows across registration, posts and administration."""

import pytest
from httpx import AsyncClient

from tests.conftest import API, auth_headers


async def _register_and_login(client: AsyncClient, name: str, email: str) -> dict[str, str]:
    resp = await client.post(
        f"{API}/auth/register", json={"name": name, "email": email, "password": "secret123"}
    )
    assert resp.status_code == 201
    resp = await client.post(f"{API}/auth/login", json={"email": email, "password": "secret123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.mark.asyncio
async def test_owner_stranger_admin_lifecycle(async_client: AsyncClient, admin):
    author = await _register_and_login(async_client, "Author", "author@example.com")
    stranger = await _register_and_login(async_client, "Stranger", "stranger@example.com")
    moderator = auth_headers(admin)

    resp = await async_client.post(
        f"{API}/posts", json={"title": "P", "content": "Body"}, headers=author
    )
    post_id = resp.json()["post"]["id"]
    url = f"{API}/posts/{post_id}"

    assert (await async_client.put(url, json={"title": "P v2"}, headers=author)).status_code == 200
    assert (await async_client.put(url, json={"title": "mine"}, headers=stranger)).status_code == 403
    assert (await async_client.put(url, json={"title": "P v3"}, headers=moderator)).status_code == 200
    assert (await async_client.delete(url, headers=moderator)).status_code == 200
    assert (await async_client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_admin_manages_registered_account(async_client: AsyncClient, admin):
    await _register_and_login(async_client, "Dana", "dana@example.com")
    users = (await async_client.get(f"{API}/users", headers=auth_headers(admin))).json()
    dana = next(u for u in users if u["email"] == "dana@example.com")

    resp = await async_client.put(
        f"{API}/users/{dana['id']}", json={"role": "admin"}, headers=auth_headers(admin)
    )
    assert resp.status_code == 200

    # A fresh login now carries the new role.
    resp = await async_client.post(
        f"{API}/auth/login", json={"email": "dana@example.com", "password": "secret123"}
    )
    fresh = {"Authorization": f"Bearer {resp.json()['token']}"}
    assert (await async_client.get(f"{API}/users", headers=fresh)).status_code == 200


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_unknown_route_uses_message_shape(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not Found"}


def test_missing_secret_is_fatal_at_startup(monkeypatch):
    from inkwell.core.config import settings
    from inkwell.core.exceptions import ConfigurationError
    from inkwell.main import check_configuration

    check_configuration()
    monkeypatch.setattr(settings, "SECRET_KEY", "")
    with pytest.raises(ConfigurationError):
        check_configuration()


@pytest.mark.asyncio
async def test_seed_admin_creates_one_account(session_factory, db_session, monkeypatch):
    from sqlalchemy import select

    import inkwell.main
    from inkwell.core.config import settings
    from inkwell.core.security import verify_password
    from inkwell.models.user import User

    monkeypatch.setattr(inkwell.main, "async_session_factory", session_factory)
    monkeypatch.setattr(settings, "FIRST_ADMIN_EMAIL", " Root@Example.com ")
    monkeypatch.setattr(settings, "FIRST_ADMIN_PASSWORD", "root-secret")

    await inkwell.main.seed_admin()
    await inkwell.main.seed_admin()

    users = (await db_session.execute(select(User))).scalars().all()
    assert [(u.email, u.role) for u in users] == [("root@example.com", "admin")]
    assert verify_password("root-secret", users[0].hashed_password)


@pytest.mark.asyncio
async def test_seed_admin_skipped_when_unconfigured(session_factory, db_session, monkeypatch):
    from sqlalchemy import func, select

    import inkwell.main
    from inkwell.core.config import settings
    from inkwell.models.user import User

    monkeypatch.setattr(inkwell.main, "async_session_factory", session_factory)
    monkeypatch.setattr(settings, "FIRST_ADMIN_EMAIL", None)
    monkeypatch.setattr(settings, "FIRST_ADMIN_PASSWORD", None)

    await inkwell.main.seed_admin()
    assert (await db_session.execute(select(func.count(User.id)))).scalar_one() == 0
