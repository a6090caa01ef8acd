import json
from typing import Any, Callable, Optional

import httpx
import jwt
import pytest

BASE_URL = "http://testserver"
JWT_SECRET = "not-the-servers-secret-but-long-enough-for-hs256"


def make_jwt(claims: dict[str, Any]) -> str:
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


class Recorder:
    """httpx.MockTransport handler that records requests and dispatches by path."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, method: str, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, url)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, str(request.url)))
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and str(r.url) == url]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


class FakeStore:
    """Stands in for ChatStore; keyed by (user_id, ai_id)."""

    def __init__(self, docs: Optional[dict[tuple[str, str], list[dict[str, Any]]]] = None) -> None:
        self.docs = docs or {}
        self.list_calls: list[tuple[str, str, int]] = []
        self.get_calls: list[tuple[str, str, str]] = []
        self.closed = False

    async def list_messages(self, user_id: str, ai_id: str, limit: int) -> list[dict[str, Any]]:
        self.list_calls.append((user_id, ai_id, limit))
        return [dict(d) for d in self.docs.get((user_id, ai_id), [])][:limit]

    async def get_message(self, user_id: str, ai_id: str, message_id: str) -> Optional[dict[str, Any]]:
        self.get_calls.append((user_id, ai_id, message_id))
        for doc in self.docs.get((user_id, ai_id), []):
            if doc["id"] == message_id:
                return dict(doc)
        return None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def transport(recorder: Recorder) -> httpx.MockTransport:
    return httpx.MockTransport(recorder)
