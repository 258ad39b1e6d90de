"""Account Balance query. Daraja posts the balance to ``result_url``."""

from __future__ import annotations

from typing import Any, Literal

from daraja.errors import ErrorKind, MpesaError
from daraja.http import HttpClient
from daraja.utils.validation import validate_url

# 1 = MSISDN, 2 = till, 4 = organisation shortcode
IdentifierType = Literal[1, 2, 4]

ACCOUNT_BALANCE_PATH = "/mpesa/accountbalance/v1/query"


class AccountModule:
    def __init__(
        self,
        http: HttpClient,
        short_code: str,
        initiator_name: str,
        security_credential: str,
    ) -> None:
        self._http = http
        self.short_code = short_code
        self.initiator_name = initiator_name
        self._security_credential = security_credential

    async def balance(
        self,
        result_url: str,
        queue_timeout_url: str,
        *,
        short_code: str | None = None,
        identifier_type: IdentifierType = 4,
    ) -> dict[str, Any]:
        """Request the balance; correlate the callback by ``ConversationID``."""
        validate_url(result_url, "resultUrl")
        validate_url(queue_timeout_url, "queueTimeOutUrl")

        short = short_code or self.short_code
        if not short or not self.initiator_name or not self._security_credential:
            raise MpesaError(
                "Account balance requires shortCode, initiatorName, and securityCredential "
                "in config",
                kind=ErrorKind.VALIDATION,
            )

        body = {
            "Initiator": self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID": "AccountBalance",
            "PartyA": short,
            "IdentifierType": identifier_type,
            "ResultURL": result_url,
            "QueueTimeOutURL": queue_timeout_url,
        }
        return await self._http.post(ACCOUNT_BALANCE_PATH, body)
