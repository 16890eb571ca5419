"""
Client-side session state.

``SessionManager`` holds who is logged in, persists the session token
through a ``TokenStore`` and exposes login / register / logout / restore.
It is an explicit three-state machine::

    ANONYMOUS ──login──▶ AUTHENTICATED
        ▲                    │
        └──────logout────────┘

    (start) ──restore──▶ RESTORING ──▶ AUTHENTICATED | ANONYMOUS

Every state change goes through ``_transition`` while holding one lock,
so a startup ``restore()`` never interleaves with ``login()``/``logout()``.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path
from typing import Any

import httpx

from inkwell.client.api import DEFAULT_PREFIX, ApiClient, ApiError

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"


# ── Token persistence ───────────────────────────────────────────────
class TokenStore:
    def get(self) -> str | None:
        raise NotImplementedError

    def set(self, token: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    def __init__(self, token: str | None = None):
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Keeps the token in a small file so it survives process restarts."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self) -> str | None:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        self.path.chmod(0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


# ── Session manager ─────────────────────────────────────────────────
class SessionManager:
    def __init__(
        self,
        http: httpx.AsyncClient,
        token_store: TokenStore | None = None,
        prefix: str = DEFAULT_PREFIX,
    ):
        self.token_store = token_store or MemoryTokenStore()
        self.api = ApiClient(http, token_getter=self.token_store.get, prefix=prefix)
        self._state = SessionState.ANONYMOUS
        self._account: dict[str, Any] | None = None
        self._lock = asyncio.Lock()
        # Set once restore() has settled the initial state.
        self.ready = asyncio.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def account(self) -> dict[str, Any] | None:
        return self._account

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and (self._account or {}).get("role") == "admin"

    def _transition(
        self,
        state: SessionState,
        account: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> None:
        if state is SessionState.ANONYMOUS:
            self.token_store.clear()
            account = None
        elif token is not None:
            self.token_store.set(token)
        logger.debug("Session %s -> %s", self._state.value, state.value)
        self._state = state
        self._account = account

    async def login(self, email: str, password: str) -> dict[str, Any]:
        async with self._lock:
            return await self._login(email, password)

    async def _login(self, email: str, password: str) -> dict[str, Any]:
        # A failed login leaves whatever session was there untouched.
        response = await self.api.login(email, password)
        self._transition(SessionState.AUTHENTICATED, response["user"], response["token"])
        return response["user"]

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        async with self._lock:
            await self.api.register(name, email, password)
            return await self._login(email, password)

    async def logout(self) -> None:
        async with self._lock:
            self._transition(SessionState.ANONYMOUS)

    async def restore(self) -> SessionState:
        """Settle the startup state from a persisted token, if any."""
        async with self._lock:
            try:
                if not self.token_store.get():
                    self._transition(SessionState.ANONYMOUS)
                    return self._state
                self._transition(SessionState.RESTORING)
                try:
                    account = await self.api.get_profile()
                except (ApiError, httpx.TransportError) as exc:
                    # Expired or rejected token just means "not logged in".
                    logger.info("Discarding stored session: %s", exc)
                    self._transition(SessionState.ANONYMOUS)
                else:
                    self._transition(SessionState.AUTHENTICATED, account)
                return self._state
            finally:
                self.ready.set()

    def update_local(self, account: dict[str, Any]) -> None:
        """Replace the in-memory account after a successful profile edit."""
        if self._state is not SessionState.AUTHENTICATED:
            raise RuntimeError("No authenticated session to update")
        self._transition(SessionState.AUTHENTICATED, account)
