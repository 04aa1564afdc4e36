"""
services/errors.py
────────────────────────────────────────────────────────────────────────
Everything `ApiClient` raises derives from `ApiError`:

* HttpError    – the server answered with a non-2xx status
* NetworkError – no answer at all (DNS, connect, timeout, reset)
* DecodeError  – a 2xx body that should have been JSON but isn't
"""
from __future__ import annotations

from typing import Any


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.details = details

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"Error {self.status}: {self.message}"


class HttpError(ApiError):
    status: int


class NetworkError(ApiError):
    pass


class DecodeError(ApiError):
    pass


class RefreshFailure(Exception):
    """Token refresh did not yield a new access token. Never leaves the client."""
