"""Python client for the Inkwell API and its session state machine."""

from inkwell.client.api import ApiClient, ApiError
from inkwell.client.session import (FileTokenStore, MemoryTokenStore,
                                    SessionManager, SessionState, TokenStore)

__all__ = [
    "ApiClient",
    "ApiError",
    "FileTokenStore",
    "MemoryTokenStore",
    "SessionManager",
    "SessionState",
    "TokenStore",
]
