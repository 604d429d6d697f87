"""Shared test helpers: scripted HTTP server and recording sleep."""

from __future__ import annotations

import json
from typing import Any

import httpx

TEST_TOKEN = "abc12345"
BASE_URL = "https://api.test.example"

SUCCESS = {"status": "success", "message": "Notification sent successfully"}


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class MockServer:
    """Scripted HTTP responses served through httpx.MockTransport.

    The last scripted response repeats once the script runs out.
    """

    def __init__(self, responses: list[httpx.Response | Exception]) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses[min(len(self.requests), len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def json_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


def json_response(
    status_code: int,
    body: Any,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    return httpx.Response(status_code, json=body, headers=headers)


def error_body(message: str, code: str = "", param: str | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"type": "error", "code": code, "message": message}
    if param is not None:
        error["param"] = param
    return {"status": "error", "error": error}
