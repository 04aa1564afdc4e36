"""
In-process stand-in for the REST backend, served to `ApiClient` through
`httpx.ASGITransport`.

Access tokens are "access-<n>"; only the newest one is accepted.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from fastapi import APIRouter, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

PDF_BYTES = b"%PDF-1.4\n\x00\xff\xfe binary \x89PNG\r\n%%EOF"


@dataclass
class BackendState:
    access_token: str = "access-1"
    refresh_token: str = "refresh-1"
    issued: int = 1

    refresh_calls: int = 0
    refresh_delay: float = 0.05
    refresh_status: int = 200
    refresh_body: dict | None = None      # overrides the normal token payload
    reject_all: bool = False              # even fresh tokens get a 401

    seen_tokens: list[str] = field(default_factory=list)
    last_headers: dict[str, str] = field(default_factory=dict)
    last_body: bytes = b""
    profiles: dict[str, dict] = field(default_factory=dict)


def create_app(state: BackendState) -> FastAPI:
    router = APIRouter()

    def _require_token(authorization: str | None) -> None:
        token = (authorization or "").removeprefix("Bearer ")
        if state.reject_all or token != state.access_token:
            raise HTTPException(status_code=401, detail="Unauthorized")
        state.seen_tokens.append(token)

    # ───────── auth ─────────
    @router.post("/auth/refresh")
    async def refresh(request: Request):
        state.refresh_calls += 1
        payload = await request.json()
        await asyncio.sleep(state.refresh_delay)

        if state.refresh_status != 200:
            return JSONResponse({"message": "refresh rejected"}, status_code=state.refresh_status)
        if state.refresh_body is not None:
            return JSONResponse(state.refresh_body)
        if payload.get("refreshToken") != state.refresh_token:
            return JSONResponse({"message": "bad refresh token"}, status_code=401)

        state.issued += 1
        state.access_token = f"access-{state.issued}"
        state.refresh_token = f"refresh-{state.issued}"
        return {
            "user": {"id": "u-1"},
            "tokens": {
                "accessToken": state.access_token,
                "refreshToken": state.refresh_token,
            },
        }

    # ───────── plain resources ─────────
    @router.get("/items")
    async def items(request: Request, authorization: str | None = Header(None)):
        _require_token(authorization)
        state.last_headers = dict(request.headers)
        return [{"id": 1, "name": "oats"}, {"id": 2, "name": "rice"}]

    @router.post("/items")
    async def create_item(request: Request, authorization: str | None = Header(None)):
        _require_token(authorization)
        state.last_headers = dict(request.headers)
        state.last_body = await request.body()
        return JSONResponse({"id": 3}, status_code=201)

    @router.delete("/items/{item_id}")
    async def delete_item(item_id: int, authorization: str | None = Header(None)):
        _require_token(authorization)
        return Response(status_code=204)

    @router.get("/export.pdf")
    async def export_pdf(authorization: str | None = Header(None)):
        _require_token(authorization)
        return Response(content=PDF_BYTES, media_type="application/pdf")

    @router.get("/empty")
    async def empty(authorization: str | None = Header(None)):
        _require_token(authorization)
        return Response(content=b"", status_code=200, media_type="application/json")

    @router.get("/broken")
    async def broken(authorization: str | None = Header(None)):
        _require_token(authorization)
        return Response(content=b"{not json", media_type="application/json")

    # ───────── error shapes ─────────
    @router.get("/fail/message")
    async def fail_message():
        return JSONResponse(
            {"message": "Meal not found", "error": "Not Found", "statusCode": 404},
            status_code=404,
        )

    @router.get("/fail/error")
    async def fail_error():
        return JSONResponse({"error": "quota exceeded"}, status_code=429)

    @router.get("/fail/list")
    async def fail_list():
        return JSONResponse(
            {"message": ["weight must be positive", "age must be an integer"]},
            status_code=400,
        )

    @router.get("/fail/text")
    async def fail_text():
        return PlainTextResponse("upstream exploded", status_code=502)

    # ───────── nutrition profile ─────────
    @router.get("/nutrition/profile/{user_id}")
    async def get_profile(user_id: str, authorization: str | None = Header(None)):
        _require_token(authorization)
        if user_id not in state.profiles:
            # the real backend answers "no profile yet" with a 401
            raise HTTPException(status_code=401, detail="Profile not found")
        return state.profiles[user_id]

    @router.post("/nutrition/profile")
    async def create_profile(request: Request, authorization: str | None = Header(None)):
        _require_token(authorization)
        body = await request.json()
        profile = {"id": f"p-{body['userId']}", **body}
        state.profiles[body["userId"]] = profile
        return JSONResponse(profile, status_code=201)

    @router.put("/nutrition/profile/{user_id}/goals")
    async def update_goals(
        user_id: str, request: Request, authorization: str | None = Header(None)
    ):
        _require_token(authorization)
        profile = state.profiles[user_id]
        profile["macroGoals"] = await request.json()
        return profile

    app = FastAPI(title="fake backend")

    @app.exception_handler(HTTPException)
    async def nest_style_error(request: Request, exc: HTTPException):
        return JSONResponse(
            {"statusCode": exc.status_code, "message": exc.detail, "error": "Unauthorized"},
            status_code=exc.status_code,
        )

    app.include_router(router, prefix="/api")
    return app
