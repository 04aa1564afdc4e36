"""
Centralised settings loader.

Every key can be overridden through the environment or a local `.env`
file (names are matched case-insensitively, e.g. API_URL → api_url).
Dict / list values are read as JSON.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime ────────────────────────────────────────────────────
    env_name: str = "local"
    log_level: str = "INFO"

    # ─── backend ────────────────────────────────────────────────────
    api_url: str = "http://localhost:3000/api"
    refresh_endpoint: str = "auth/refresh"
    request_timeout: float | None = None   # seconds; None = wait forever

    # sent on every call (the tunnel used for device testing needs it)
    extra_headers: dict[str, str] = Field(
        default_factory=lambda: {"ngrok-skip-browser-warning": "true"}
    )

    # endpoints whose 401 means "no such resource for this user"
    not_found_401_endpoints: list[str] = Field(
        default_factory=lambda: [r"nutrition/profile/[^/]+"]
    )

    # ─── session seed for scripts ───────────────────────────────────
    access_token: str | None = None
    refresh_token: str | None = None

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
