"""Tests for the OAuth credential fetcher and token cache."""

import asyncio
import base64
import time
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from daraja.auth import (
    DEFAULT_TOKEN_LIFETIME,
    AuthProvider,
    CachedToken,
    TokenResult,
    basic_credentials,
    fetch_token,
    get_oauth_url,
    is_token_expired,
    parse_expires_in,
)
from daraja.errors import ErrorKind, MpesaError

TOKEN_URL = "https://sandbox.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials"


def _response(status_code: int = 200, json_body=None, text: str | None = None) -> httpx.Response:
    request = httpx.Request("GET", TOKEN_URL)
    if text is not None:
        return httpx.Response(status_code=status_code, text=text, request=request)
    return httpx.Response(status_code=status_code, json=json_body, request=request)


# -- URL / header helpers ----------------------------------------------------


class TestHelpers:
    def test_sandbox_oauth_url(self):
        assert get_oauth_url("sandbox") == TOKEN_URL

    def test_production_oauth_url(self):
        assert get_oauth_url("production") == (
            "https://api.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials"
        )

    def test_basic_credentials(self):
        encoded = basic_credentials("key", "secret")
        assert base64.b64decode(encoded).decode() == "key:secret"


# -- fetch_token ---------------------------------------------------------------


async def test_fetch_token_success(mock_httpx) -> None:
    mock_httpx.get.return_value = _response(json_body={"access_token": "tok", "expires_in": "3599"})

    result = await fetch_token(TOKEN_URL, "key", "secret")

    assert result == TokenResult(access_token="tok", expires_in="3599")
    url = mock_httpx.get.call_args.args[0]
    headers = mock_httpx.get.call_args.kwargs["headers"]
    assert url == TOKEN_URL
    assert headers["Authorization"] == f"Basic {basic_credentials('key', 'secret')}"


async def test_fetch_token_prefers_error_description(mock_httpx) -> None:
    body = {"errorDescription": "Invalid credentials", "error": "invalid_client"}
    mock_httpx.get.return_value = _response(400, json_body=body)

    with pytest.raises(MpesaError) as exc_info:
        await fetch_token(TOKEN_URL, "key", "bad")

    assert exc_info.value.kind is ErrorKind.AUTH
    assert exc_info.value.message == "Invalid credentials"
    assert exc_info.value.response_body == body


async def test_fetch_token_falls_back_to_error_field(mock_httpx) -> None:
    mock_httpx.get.return_value = _response(401, json_body={"error": "invalid_client"})

    with pytest.raises(MpesaError, match="invalid_client"):
        await fetch_token(TOKEN_URL, "key", "bad")


async def test_fetch_token_falls_back_to_status_text(mock_httpx) -> None:
    mock_httpx.get.return_value = _response(503, text="<html>down</html>")

    with pytest.raises(MpesaError) as exc_info:
        await fetch_token(TOKEN_URL, "key", "secret")

    assert exc_info.value.message == "Service Unavailable"
    assert exc_info.value.response_body is None


async def test_fetch_token_missing_access_token(mock_httpx) -> None:
    mock_httpx.get.return_value = _response(json_body={"expires_in": "3599"})

    with pytest.raises(MpesaError, match="missing access_token") as exc_info:
        await fetch_token(TOKEN_URL, "key", "secret")

    assert exc_info.value.kind is ErrorKind.AUTH
    assert exc_info.value.response_body == {"expires_in": "3599"}


async def test_fetch_token_network_error(mock_httpx) -> None:
    mock_httpx.get.side_effect = httpx.ConnectError("Connection refused")

    with pytest.raises(MpesaError) as exc_info:
        await fetch_token(TOKEN_URL, "key", "secret")

    assert exc_info.value.kind is ErrorKind.AUTH
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert mock_httpx.get.await_count == 1


# -- parse_expires_in / is_token_expired ---------------------------------------


class TestParseExpiresIn:
    def test_numeric_string(self):
        assert parse_expires_in("3599") == 3599

    def test_int(self):
        assert parse_expires_in(1800) == 1800

    def test_leading_digits(self):
        assert parse_expires_in("120s") == 120

    def test_non_numeric_falls_back(self):
        assert parse_expires_in("soon") == DEFAULT_TOKEN_LIFETIME

    def test_missing_falls_back(self):
        assert parse_expires_in(None) == DEFAULT_TOKEN_LIFETIME


class TestIsTokenExpired:
    def test_fresh_token(self):
        cache = CachedToken(token="t", expires_at=1000.0 + 3600)
        assert is_token_expired(cache, 60, now=1000.0) is False

    def test_within_buffer_counts_as_expired(self):
        cache = CachedToken(token="t", expires_at=1000.0 + 59)
        assert is_token_expired(cache, 60, now=1000.0) is True

    def test_exactly_at_buffer_is_expired(self):
        cache = CachedToken(token="t", expires_at=1000.0 + 60)
        assert is_token_expired(cache, 60, now=1000.0) is True

    def test_past_expiry(self):
        cache = CachedToken(token="t", expires_at=900.0)
        assert is_token_expired(cache, 0, now=1000.0) is True


# -- AuthProvider --------------------------------------------------------------


@pytest.fixture
def mock_fetch():
    with patch("daraja.auth.fetch_token", new_callable=AsyncMock) as fetch:
        fetch.return_value = TokenResult(access_token="token-1", expires_in="3599")
        yield fetch


async def test_get_token_reuses_cached_token(mock_fetch) -> None:
    auth = AuthProvider("key", "secret")

    first = await auth.get_token()
    second = await auth.get_token()

    assert first == second == "token-1"
    assert mock_fetch.await_count == 1


async def test_get_token_uses_environment_url(mock_fetch) -> None:
    auth = AuthProvider("key", "secret", "production")
    await auth.get_token()

    mock_fetch.assert_awaited_once_with(get_oauth_url("production"), "key", "secret")


async def test_invalidate_forces_refresh(mock_fetch) -> None:
    auth = AuthProvider("key", "secret")
    await auth.get_token()

    mock_fetch.return_value = TokenResult(access_token="token-2", expires_in="3599")
    auth.invalidate()

    assert auth.cached is None
    assert await auth.get_token() == "token-2"
    assert mock_fetch.await_count == 2


async def test_token_inside_buffer_is_refreshed(mock_fetch) -> None:
    auth = AuthProvider("key", "secret", buffer_seconds=60)
    await auth.get_token()
    auth._cache = CachedToken(token="token-1", expires_at=time.time() + 30)

    mock_fetch.return_value = TokenResult(access_token="token-2", expires_in="3599")

    assert await auth.get_token() == "token-2"
    assert mock_fetch.await_count == 2


async def test_expiry_uses_reported_lifetime(mock_fetch) -> None:
    mock_fetch.return_value = TokenResult(access_token="t", expires_in="120")
    auth = AuthProvider("key", "secret")

    before = time.time()
    await auth.get_token()

    assert auth.cached is not None
    assert before + 120 <= auth.cached.expires_at <= time.time() + 120


async def test_unparseable_lifetime_uses_default(mock_fetch) -> None:
    mock_fetch.return_value = TokenResult(access_token="t", expires_in="never")
    auth = AuthProvider("key", "secret")

    before = time.time()
    await auth.get_token()

    assert auth.cached.expires_at >= before + DEFAULT_TOKEN_LIFETIME


async def test_auth_error_propagates_without_stale_token(mock_fetch) -> None:
    auth = AuthProvider("key", "secret")
    await auth.get_token()
    auth._cache = CachedToken(token="token-1", expires_at=time.time() - 1)

    mock_fetch.side_effect = MpesaError("denied", kind=ErrorKind.AUTH, response_body={"x": 1})

    with pytest.raises(MpesaError) as exc_info:
        await auth.get_token()
    assert exc_info.value.kind is ErrorKind.AUTH
    assert exc_info.value.response_body == {"x": 1}


async def test_concurrent_callers_share_one_refresh(mock_fetch) -> None:
    release = asyncio.Event()

    async def slow_fetch(*args):
        await release.wait()
        return TokenResult(access_token="shared", expires_in="3599")

    mock_fetch.side_effect = slow_fetch
    auth = AuthProvider("key", "secret")

    tasks = [asyncio.create_task(auth.get_token()) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()
    tokens = await asyncio.gather(*tasks)

    assert tokens == ["shared"] * 5
    assert mock_fetch.await_count == 1


async def test_failed_refresh_is_not_memoised(mock_fetch) -> None:
    mock_fetch.side_effect = [
        MpesaError("down", kind=ErrorKind.AUTH),
        TokenResult(access_token="recovered", expires_in="3599"),
    ]
    auth = AuthProvider("key", "secret")

    with pytest.raises(MpesaError):
        await auth.get_token()
    assert await auth.get_token() == "recovered"


async def test_invalidate_during_refresh_discards_result(mock_fetch) -> None:
    release = asyncio.Event()

    async def slow_fetch(*args):
        await release.wait()
        return TokenResult(access_token="stale", expires_in="3599")

    mock_fetch.side_effect = slow_fetch
    auth = AuthProvider("key", "secret")

    task = asyncio.create_task(auth.get_token())
    await asyncio.sleep(0)
    auth.invalidate()
    release.set()

    assert await task == "stale"
    assert auth.cached is None
