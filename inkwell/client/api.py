"""
Async HTTP client for the Inkwell API.

Thin wrapper over ``httpx.AsyncClient``: one coroutine per route, JSON in,
JSON out. Any non-2xx response raises ``ApiError`` carrying the server's
``message`` verbatim.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx

DEFAULT_PREFIX = "/api/v1"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: list | None = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors
        super().__init__(message)


def _raise_for_status(response: httpx.Response) -> Any:
    try:
        data = response.json()
    except ValueError:
        data = None
    if response.is_success:
        return data
    message = "Something went wrong"
    errors = None
    if isinstance(data, dict):
        message = data.get("message") or message
        errors = data.get("errors")
    raise ApiError(response.status_code, message, errors)


class ApiClient:
    """Route-per-method client; the bearer token comes from *token_getter*."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        token_getter: Callable[[], str | None] = lambda: None,
        prefix: str = DEFAULT_PREFIX,
    ):
        self._http = http
        self._token_getter = token_getter
        self._prefix = prefix.rstrip("/")

    def _headers(self, auth: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._token_getter() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, json: Any = None, auth: bool = True) -> Any:
        response = await self._http.request(
            method,
            f"{self._prefix}{path}",
            json=json,
            headers=self._headers(auth),
        )
        return _raise_for_status(response)

    # ── Auth ────────────────────────────────────────────────────────
    async def register(self, name: str, email: str, password: str) -> dict:
        payload = {"name": name, "email": email, "password": password}
        return await self._request("POST", "/auth/register", payload, auth=False)

    async def login(self, email: str, password: str) -> dict:
        payload = {"email": email, "password": password}
        return await self._request("POST", "/auth/login", payload, auth=False)

    # ── Posts ───────────────────────────────────────────────────────
    async def list_posts(self) -> list[dict]:
        return await self._request("GET", "/posts", auth=False)

    async def get_post(self, post_id: int) -> dict:
        return await self._request("GET", f"/posts/{post_id}", auth=False)

    async def create_post(self, title: str, content: str) -> dict:
        return await self._request("POST", "/posts", {"title": title, "content": content})

    async def update_post(self, post_id: int, **fields: str) -> dict:
        return await self._request("PUT", f"/posts/{post_id}", fields)

    async def delete_post(self, post_id: int) -> dict:
        return await self._request("DELETE", f"/posts/{post_id}")

    # ── Profile ─────────────────────────────────────────────────────
    async def get_profile(self) -> dict:
        return await self._request("GET", "/profile")

    async def update_profile(self, **fields: str) -> dict:
        return await self._request("PUT", "/profile", fields)

    async def my_posts(self) -> list[dict]:
        return await self._request("GET", "/profile/posts")

    # ── Users (admin only) ──────────────────────────────────────────
    async def list_users(self) -> list[dict]:
        return await self._request("GET", "/users")

    async def get_user(self, user_id: int) -> dict:
        return await self._request("GET", f"/users/{user_id}")

    async def update_user(self, user_id: int, **fields: str) -> dict:
        return await self._request("PUT", f"/users/{user_id}", fields)

    async def delete_user(self, user_id: int) -> dict:
        return await self._request("DELETE", f"/users/{user_id}")
