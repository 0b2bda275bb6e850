"""Helpers for tests: payload builders and a fake Queek backend."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from aiohttp import web
from multidict import CIMultiDictProxy

BASE_PATH = "/api/v1"


def token_data(access_token: str, refresh_token: str) -> dict[str, Any]:
    """Return a token payload as issued by verify-otp/register/refresh."""
    return {
        "token_type": "Bearer",
        "access_token": access_token,
        "expires_in": 3600,
        "expires_at": "2026-02-28T10:00:00Z",
        "refresh_token": refresh_token,
        "refresh_expires_in": 86400,
        "refresh_expires_at": "2026-03-01T10:00:00Z",
        "platform": "client_web",
        "user": {
            "id": "user-1",
            "first_name": "A",
            "last_name": "B",
            "name": "A B",
            "email": "a@example.com",
            "phone": "+14155552671",
            "avatar": None,
            "status": "active",
        },
    }


def otp_challenge() -> dict[str, Any]:
    return {
        "next_action": "verify_otp",
        "phone": "+14155552671",
        "user_exists": True,
        "expires_in": 120,
        "resend_in": 120,
    }


def envelope(data: Any, message: str = "ok") -> dict[str, Any]:
    return {"status": "success", "message": message, "data": data}


@dataclass
class RecordedRequest:
    """A request received by the fake backend."""

    method: str
    path: str
    query: dict[str, str]
    headers: CIMultiDictProxy[str]
    body: bytes

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None

    @property
    def authorization(self) -> str | None:
        return self.headers.get("Authorization")


@dataclass
class FakeBackend:
    """Answers every request with the next queued response."""

    base_url: str = ""
    requests: list[RecordedRequest] = field(default_factory=list)
    _queue: list[web.StreamResponse] = field(default_factory=list)

    def queue_json(self, status: int, payload: Any) -> None:
        self._queue.append(web.json_response(payload, status=status))

    def queue_text(
        self, status: int, text: str, content_type: str = "text/plain"
    ) -> None:
        self._queue.append(
            web.Response(status=status, text=text, content_type=content_type)
        )

    def paths(self) -> list[str]:
        return [request.path for request in self.requests]

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=dict(request.query),
                headers=request.headers,
                body=await request.read(),
            )
        )
        if not self._queue:
            return web.json_response(
                {"message": "No queued response", "error_code": "test_misconfigured"},
                status=500,
            )
        return self._queue.pop(0)
