from __future__ import annotations

import httpx
import pytest

from services.api_client import ApiClient
from services.auth import SessionStore
from fake_backend import BackendState, create_app

BASE = "http://testserver/api"


class RecordingSession(SessionStore):
    """SessionStore that counts how often the client touched it."""

    def __init__(self) -> None:
        super().__init__()
        self.clear_calls = 0
        self.update_calls = 0

    def update_tokens(self, tokens):
        self.update_calls += 1
        super().update_tokens(tokens)

    def clear_auth(self) -> None:
        self.clear_calls += 1
        super().clear_auth()


@pytest.fixture
def backend() -> BackendState:
    return BackendState()


@pytest.fixture
def session(backend: BackendState) -> RecordingSession:
    s = RecordingSession()
    s.set_auth(
        {"id": "u-1"},
        {"accessToken": backend.access_token, "refreshToken": backend.refresh_token},
    )
    return s


@pytest.fixture
def make_client(backend: BackendState, session: RecordingSession):
    """Build an ApiClient wired to the in-process backend (inside the test's loop)."""

    def _make(**kwargs) -> ApiClient:
        kwargs.setdefault("extra_headers", {"ngrok-skip-browser-warning": "true"})
        kwargs.setdefault("not_found_401_endpoints", [r"nutrition/profile/[^/]+"])
        return ApiClient(
            session,
            BASE,
            transport=httpx.ASGITransport(app=create_app(backend)),
            **kwargs,
        )

    return _make
