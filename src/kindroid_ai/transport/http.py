"""
REST HTTP client for the Kindroid API.

One request per call, no retries. Any status other than 200 is an error and
the response body is not parsed in that case.
"""

from typing import Any, Optional

import httpx
from loguru import logger

from kindroid_ai.errors import HttpError, ResponseDecodeError, TransportError

DEFAULT_BASE_URL = "https://api.kindroid.ai/v1"
USER_AGENT = "kindroid-ai-sdk/0.1.0"
# seconds; /send-message blocks until the model has replied
DEFAULT_TIMEOUT = 120.0


class HttpClient:
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
            timeout=timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    @staticmethod
    def _check(resp: httpx.Response) -> httpx.Response:
        if resp.status_code != 200:
            raise HttpError(resp.status_code, resp.reason_phrase)
        return resp

    async def _send(self, method: str, url: str, body: Optional[dict[str, Any]] = None,
                    authenticated: bool = True) -> httpx.Response:
        headers = self._auth_headers() if authenticated else None
        logger.debug("{} {}", method, url)
        try:
            resp = await self._client.request(method, url, json=body, headers=headers)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return self._check(resp)

    async def post_text(self, path: str, body: dict[str, Any]) -> str:
        resp = await self._send("POST", path, body)
        return resp.text

    async def post_json(self, path: str, body: dict[str, Any]) -> Any:
        resp = await self._send("POST", path, body)
        try:
            return resp.json()
        except ValueError as e:
            raise ResponseDecodeError(f"invalid JSON from {path}: {e}") from e

    async def post(self, path: str, body: dict[str, Any]) -> None:
        await self._send("POST", path, body)

    async def get_bytes(self, url: str, authenticated: bool = False) -> bytes:
        """GET an absolute resource URL (e.g. a signed audio link)."""
        resp = await self._send("GET", url, authenticated=authenticated)
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()
