"""Transaction Status query, for when a result callback never arrived."""

from __future__ import annotations

from typing import Any

from daraja.errors import ErrorKind, MpesaError
from daraja.http import HttpClient
from daraja.operations.account import IdentifierType
from daraja.utils.validation import require_non_empty, validate_url

TRANSACTION_STATUS_PATH = "/mpesa/transactionstatus/v1/query"


class TransactionModule:
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

    async def status(
        self,
        transaction_id: str,
        result_url: str,
        queue_timeout_url: str,
        remarks: str,
        *,
        short_code: str | None = None,
        identifier_type: IdentifierType = 4,
    ) -> dict[str, Any]:
        require_non_empty(transaction_id, "transactionId")
        validate_url(result_url, "resultUrl")
        validate_url(queue_timeout_url, "queueTimeOutUrl")
        require_non_empty(remarks, "remarks")

        short = short_code or self.short_code
        if not short or not self.initiator_name or not self._security_credential:
            raise MpesaError(
                "Transaction status requires shortCode, initiatorName, and securityCredential "
                "in config",
                kind=ErrorKind.VALIDATION,
            )

        body = {
            "Initiator": self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID": "TransactionStatusQuery",
            "TransactionID": transaction_id,
            "PartyA": short,
            "IdentifierType": identifier_type,
            "ResultURL": result_url,
            "QueueTimeOutURL": queue_timeout_url,
            "Remarks": remarks,
        }
        return await self._http.post(TRANSACTION_STATUS_PATH, body)
