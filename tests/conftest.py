"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

MPESA_ENV_VARS = (
    "MPESA_CONSUMER_KEY",
    "MPESA_CONSUMER_SECRET",
    "MPESA_ENVIRONMENT",
    "MPESA_SHORT_CODE",
    "MPESA_PASS_KEY",
    "MPESA_INITIATOR_NAME",
    "MPESA_SECURITY_CREDENTIAL",
)


@pytest.fixture(autouse=True)
def _clean_mpesa_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's MPESA_* variables out of the tests."""
    for name in MPESA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_httpx():
    """Patch ``httpx.AsyncClient`` and yield the client used inside ``async with``."""
    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client_cls.return_value = mock_client
        mock_client.client_cls = mock_client_cls
        yield mock_client


@pytest.fixture
def mock_http() -> MagicMock:
    """An HttpClient stand-in whose ``post`` returns a canned Daraja response."""
    http = MagicMock()
    http.post = AsyncMock(
        return_value={
            "ConversationID": "AG_20191219_00005797af5d7d75f652",
            "OriginatorConversationID": "16740-34861180-1",
            "ResponseCode": "0",
            "ResponseDescription": "Accept the service request successfully.",
        }
    )
    return http


@pytest.fixture
def stk_success_body() -> dict:
    return {
        "Body": {
            "stkCallback": {
                "MerchantRequestID": "29115-34620561-1",
                "CheckoutRequestID": "ws_CO_191220191020363925",
                "ResultCode": 0,
                "ResultDesc": "The service request is processed successfully.",
                "CallbackMetadata": {
                    "Item": [
                        {"Name": "Amount", "Value": 100},
                        {"Name": "MpesaReceiptNumber", "Value": "ABC123"},
                        {"Name": "TransactionDate", "Value": "2023-04-26 12:30:00"},
                        {"Name": "PhoneNumber", "Value": "254712345678"},
                        {"Name": "Balance", "Value": 500},
                    ]
                },
            }
        }
    }
