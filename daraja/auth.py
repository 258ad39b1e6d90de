"""OAuth access tokens for Daraja: credential exchange plus an in-memory cache.

Daraja issues client-credential tokens valid for roughly an hour. The
``AuthProvider`` keeps one token per process and refreshes it shortly before
it expires, so outbound calls never authenticate on every request.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx

from daraja.config import get_base_url
from daraja.errors import ErrorKind, MpesaError

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_BUFFER_SECONDS = 60  # refresh this long before expiry
DEFAULT_TOKEN_LIFETIME = 3599  # what Daraja normally reports
TOKEN_TIMEOUT = 30  # seconds

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class TokenResult:
    """Successful credential exchange: the token and its raw ``expires_in``."""

    access_token: str
    expires_in: Any = None


@dataclass(frozen=True)
class CachedToken:
    token: str
    expires_at: float  # epoch seconds


def get_oauth_url(environment: str) -> str:
    return f"{get_base_url(environment)}/oauth/v1/generate?grant_type=client_credentials"


def basic_credentials(consumer_key: str, consumer_secret: str) -> str:
    """Return ``base64(key:secret)`` for the Basic auth header."""
    raw = f"{consumer_key}:{consumer_secret}".encode()
    return base64.b64encode(raw).decode("ascii")


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("errorDescription", "error"):
            if body.get(key) is not None:
                return str(body[key])
    return fallback


async def fetch_token(url: str, consumer_key: str, consumer_secret: str) -> TokenResult:
    """Exchange consumer credentials for an access token. Never retries.

    Raises:
        MpesaError: ``AUTH`` kind on network failure, a non-2xx status or a
            response without ``access_token``. ``response_body`` holds
            whatever Daraja sent back.
    """
    headers = {
        "Authorization": f"Basic {basic_credentials(consumer_key, consumer_secret)}",
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=TOKEN_TIMEOUT) as client:
            resp = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise MpesaError(f"Token request failed: {exc}", kind=ErrorKind.AUTH) from exc

    try:
        data = json.loads(resp.text) if resp.text else None
    except ValueError:
        data = None

    if not resp.is_success:
        message = _error_message(data, resp.reason_phrase or "Failed to get access token")
        raise MpesaError(message, kind=ErrorKind.AUTH, response_body=data)

    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise MpesaError(
            "Invalid token response: missing access_token",
            kind=ErrorKind.AUTH,
            response_body=data,
        )

    return TokenResult(access_token=str(token), expires_in=data.get("expires_in"))


def parse_expires_in(expires_in: Any) -> int:
    """Parse Daraja's ``expires_in`` (a numeric string) into seconds.

    Missing or non-numeric values fall back to ``DEFAULT_TOKEN_LIFETIME``
    instead of failing; the token itself is still usable.
    """
    if isinstance(expires_in, int) and not isinstance(expires_in, bool):
        return expires_in
    if isinstance(expires_in, float) and math.isfinite(expires_in):
        return int(expires_in)
    if isinstance(expires_in, str):
        match = _LEADING_INT.match(expires_in)
        if match:
            return int(match.group(1))
    logger.warning(
        "Token response had unusable expires_in=%r, assuming %ds",
        expires_in,
        DEFAULT_TOKEN_LIFETIME,
    )
    return DEFAULT_TOKEN_LIFETIME


def is_token_expired(
    cache: CachedToken,
    buffer_seconds: float = TOKEN_EXPIRY_BUFFER_SECONDS,
    now: float | None = None,
) -> bool:
    """True once *now* is within *buffer_seconds* of the token's expiry."""
    if now is None:
        now = time.time()
    return now >= cache.expires_at - buffer_seconds


class AuthProvider:
    """Hands out a valid bearer token, refreshing it transparently.

    Concurrent callers that find the cache empty or stale share a single
    in-flight refresh rather than each hitting the token endpoint.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        environment: str = "sandbox",
        *,
        buffer_seconds: float = TOKEN_EXPIRY_BUFFER_SECONDS,
    ) -> None:
        self._consumer_key = consumer_key
        self._consumer_secret = consumer_secret
        self.environment = environment
        self.buffer_seconds = buffer_seconds
        self._cache: CachedToken | None = None
        self._pending: asyncio.Future[str] | None = None
        self._generation = 0

    @property
    def cached(self) -> CachedToken | None:
        return self._cache

    async def get_token(self) -> str:
        """Return a usable access token, fetching a new one when needed."""
        cache = self._cache
        if cache is not None and not is_token_expired(cache, self.buffer_seconds):
            return cache.token

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._refresh(self._generation))
        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if self._pending is pending and pending.done():
                self._pending = None

    def invalidate(self) -> None:
        """Drop the cached token so the next ``get_token()`` re-authenticates."""
        self._cache = None
        self._pending = None
        self._generation += 1

    async def _refresh(self, generation: int) -> str:
        logger.info("Requesting Daraja access token (environment=%s)", self.environment)
        result = await fetch_token(
            get_oauth_url(self.environment),
            self._consumer_key,
            self._consumer_secret,
        )
        lifetime = parse_expires_in(result.expires_in)
        cache = CachedToken(token=result.access_token, expires_at=time.time() + lifetime)
        # An invalidate() during the request means this token must not be cached.
        if generation == self._generation:
            self._cache = cache
        logger.info("Daraja access token refreshed, valid for %ds", lifetime)
        return cache.token
