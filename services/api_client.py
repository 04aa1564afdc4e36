"""
services/api_client.py
────────────────────────────────────────────────────────────────────────
Async client for the REST backend.

* attaches `Authorization: Bearer <token>` from the session
* decodes by response shape (204 / binary / empty / JSON)
* on 401 refreshes the access token once and retries the call once

Refresh is single-flight: however many calls hit a 401 at the same time,
one POST goes to the refresh endpoint and every caller waits on it.
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Mapping

import httpx

from config import settings
from services.auth import AuthCollaborator
from services.errors import DecodeError, HttpError, NetworkError, RefreshFailure

_LOG = logging.getLogger(__name__)

_BINARY_TYPES = ("application/pdf", "application/octet-stream")


class ApiClient:
    def __init__(
        self,
        auth: AuthCollaborator,
        base_url: str | None = None,
        *,
        extra_headers: Mapping[str, str] | None = None,
        not_found_401_endpoints: list[str] | None = None,
        refresh_endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth = auth
        self._base = (base_url or settings.api_url).rstrip("/")
        self._extra_headers = dict(
            settings.extra_headers if extra_headers is None else extra_headers
        )
        self._not_found_401 = [
            re.compile(p)
            for p in (
                settings.not_found_401_endpoints
                if not_found_401_endpoints is None
                else not_found_401_endpoints
            )
        ]
        self._refresh_endpoint = refresh_endpoint or settings.refresh_endpoint
        self._http = httpx.AsyncClient(
            timeout=settings.request_timeout if timeout is None else timeout,
            transport=transport,
        )

        # the one refresh in flight, None when idle
        self._refresh_task: asyncio.Task[str] | None = None

    # ───────────── lifecycle ─────────────
    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ───────────── public API ─────────────
    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Returns the decoded JSON body, raw `bytes` for PDF / octet-stream
        responses, or None when there is no content.

        Raises HttpError, NetworkError or DecodeError.
        """
        url = self._url(endpoint)
        response = await self._send(
            method, url, body, headers, self._auth.get_access_token()
        )

        if response.status_code == 401 and not self._is_not_found_endpoint(endpoint):
            try:
                token = await self._refreshed_access_token()
            except RefreshFailure:
                raise self._http_error(response) from None

            # second and last attempt
            response = await self._send(method, url, body, headers, token)
            if response.status_code == 401:
                _LOG.warning("%s %s still unauthorized after refresh", method, url)
                self._auth.clear_auth()

        if not response.is_success:
            raise self._http_error(response)
        return self._decode(response)

    async def get(self, endpoint: str, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, "GET", headers=headers)

    async def post(
        self, endpoint: str, body: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return await self.request(endpoint, "POST", body, headers)

    async def put(
        self, endpoint: str, body: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return await self.request(endpoint, "PUT", body, headers)

    async def patch(
        self, endpoint: str, body: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return await self.request(endpoint, "PATCH", body, headers)

    async def delete(self, endpoint: str, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, "DELETE", headers=headers)

    # ───────────── transport ─────────────
    def _url(self, endpoint: str) -> str:
        return f"{self._base}/{endpoint.lstrip('/')}"

    def _is_not_found_endpoint(self, endpoint: str) -> bool:
        path = endpoint.split("?", 1)[0].strip("/")
        return any(p.fullmatch(path) for p in self._not_found_401)

    async def _send(
        self,
        method: str,
        url: str,
        body: Any,
        headers: Mapping[str, str] | None,
        token: str | None,
    ) -> httpx.Response:
        request_headers = httpx.Headers({"Content-Type": "application/json"})
        request_headers.update(self._extra_headers)
        request_headers.update(headers or {})
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        content = json.dumps(body).encode() if body is not None else None

        _LOG.debug("→ %s %s", method, url)
        try:
            response = await self._http.request(
                method, url, headers=request_headers, content=content
            )
        except httpx.RequestError as exc:
            raise NetworkError(f"{method} {url} failed: {exc!r}") from exc
        _LOG.debug("← %s %s %s", response.status_code, method, url)
        return response

    # ───────────── single-flight refresh ─────────────
    async def _refreshed_access_token(self) -> str:
        # no await between the check and the assignment: only one leader
        if self._refresh_task is None:
            _LOG.info("access token rejected, refreshing")
            self._refresh_task = asyncio.create_task(self._refresh())
        else:
            _LOG.debug("refresh already in flight, joining it")
        return await self._refresh_task

    async def _refresh(self) -> str:
        try:
            tokens = await self._request_new_tokens()
        except RefreshFailure as exc:
            _LOG.warning("token refresh failed: %s", exc)
            self._auth.clear_auth()
            raise
        else:
            self._auth.update_tokens(tokens)
            _LOG.info("access token refreshed")
            return tokens["accessToken"]
        finally:
            self._refresh_task = None

    async def _request_new_tokens(self) -> dict[str, Any]:
        refresh_token = self._auth.get_refresh_token()
        if not refresh_token:
            raise RefreshFailure("no refresh token in session")

        # plain POST, not `request()`: a 401 here must not trigger another refresh
        try:
            response = await self._http.post(
                self._url(self._refresh_endpoint),
                json={"refreshToken": refresh_token},
                headers=self._extra_headers,
            )
        except httpx.RequestError as exc:
            raise RefreshFailure(f"refresh request failed: {exc!r}") from exc

        if not response.is_success:
            raise RefreshFailure(f"refresh answered {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            raise RefreshFailure("refresh body is not JSON") from None

        tokens = payload.get("tokens") if isinstance(payload, dict) else None
        if not isinstance(tokens, dict) or not tokens.get("accessToken"):
            raise RefreshFailure("refresh body carries no tokens")
        return tokens

    # ───────────── decoding ─────────────
    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204:
            return None

        content_type = response.headers.get("content-type", "")
        if any(t in content_type for t in _BINARY_TYPES):
            return response.content

        text = response.text
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise DecodeError(
                "response body is not valid JSON",
                status=response.status_code,
                status_text=response.reason_phrase,
                details=text,
            ) from exc

    @staticmethod
    def _http_error(response: httpx.Response) -> HttpError:
        text = response.text
        try:
            parsed = json.loads(text)
        except ValueError:
            return HttpError(
                text or response.reason_phrase,
                status=response.status_code,
                status_text=response.reason_phrase,
            )

        message: Any = None
        if isinstance(parsed, dict):
            message = parsed.get("message")
            if message is None:
                message = parsed.get("error")
        if message is None:
            message = text
        elif isinstance(message, list):
            # validation errors come back as a list of strings
            message = "; ".join(str(m) for m in message)

        return HttpError(
            str(message),
            status=response.status_code,
            status_text=response.reason_phrase,
            details=parsed,
        )
