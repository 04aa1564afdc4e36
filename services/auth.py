"""
services/auth.py
────────────────────────────────────────────────────────────────────────
Session state the API client reads tokens from.

`ApiClient` only depends on the `AuthCollaborator` protocol; `SessionStore`
is the in-memory implementation used by scripts and tests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

_LOG = logging.getLogger(__name__)


class AuthCollaborator(Protocol):
    def get_access_token(self) -> str | None: ...

    def get_refresh_token(self) -> str | None: ...

    def update_tokens(self, tokens: Mapping[str, Any]) -> None: ...

    def clear_auth(self) -> None: ...


@dataclass
class AuthSession:
    access_token: str | None = None
    refresh_token: str | None = None
    authenticated: bool = False
    user: dict[str, Any] | None = None


class SessionStore:
    """
    Holds one `AuthSession`. Token payloads use the backend's camelCase
    keys: {"accessToken": ..., "refreshToken": ...}.
    """

    def __init__(self, session: AuthSession | None = None) -> None:
        self.session = session or AuthSession()

    # --------------- reads ------------------------------------------
    def get_access_token(self) -> str | None:
        return self.session.access_token

    def get_refresh_token(self) -> str | None:
        return self.session.refresh_token

    @property
    def authenticated(self) -> bool:
        return self.session.authenticated

    @property
    def user_id(self) -> str | None:
        user = self.session.user or {}
        return user.get("id")

    # --------------- writes -----------------------------------------
    def set_auth(self, user: dict[str, Any] | None, tokens: Mapping[str, Any]) -> None:
        """Login / register success."""
        self.session = AuthSession(
            access_token=tokens["accessToken"],
            refresh_token=tokens.get("refreshToken"),
            authenticated=True,
            user=user,
        )

    def update_tokens(self, tokens: Mapping[str, Any]) -> None:
        # a refresh response may omit the refresh token; keep the old one
        self.session.access_token = tokens["accessToken"]
        self.session.authenticated = True
        self.session.refresh_token = (
            tokens.get("refreshToken") or self.session.refresh_token
        )

    def clear_auth(self) -> None:
        if self.session == AuthSession():
            return
        _LOG.warning("clearing auth state")
        self.session = AuthSession()
