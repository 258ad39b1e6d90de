"""JSON transport for Daraja REST calls.

Every request carries a fresh-enough bearer token from the ``AuthProvider``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from daraja.errors import ErrorKind, MpesaError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds

TokenGetter = Callable[[], Awaitable[str]]


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("errorMessage", "error"):
            if body.get(key) is not None:
                return str(body[key])
    return fallback


class HttpClient:
    """Thin async wrapper around ``httpx.AsyncClient`` for Daraja endpoints."""

    def __init__(
        self,
        base_url: str,
        get_access_token: TokenGetter,
        *,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._get_access_token = get_access_token
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    async def request(self, method: str, path: str, body: Any = None) -> Any:
        """Send a request and return the decoded JSON (or raw text) response.

        Raises:
            MpesaError: ``REQUEST`` kind on network failure or a non-2xx
                status; ``AUTH`` kind if no token could be obtained.
        """
        url = self.url_for(path)
        token = await self._get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        content = json.dumps(body) if body is not None else None

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as exc:
            logger.error("Daraja %s %s failed: %s", method, path, exc)
            raise MpesaError(str(exc) or "Request failed", kind=ErrorKind.REQUEST) from exc

        text = resp.text
        try:
            data = json.loads(text) if text else None
        except ValueError:
            data = text

        if not resp.is_success:
            message = _error_message(data, resp.reason_phrase or "Request failed")
            logger.warning(
                "Daraja %s %s returned %d: %s", method, path, resp.status_code, message
            )
            raise MpesaError(
                message,
                kind=ErrorKind.REQUEST,
                status_code=resp.status_code,
                response_body=data,
            )

        return data

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any) -> Any:
        return await self.request("POST", path, body)
