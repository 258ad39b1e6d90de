"""B2C (business to customer) disbursements."""

from __future__ import annotations

import logging
from typing import Any, Literal

from daraja.errors import ErrorKind, MpesaError
from daraja.http import HttpClient
from daraja.utils.validation import (
    require_non_empty,
    require_positive_amount,
    round_amount,
    validate_phone,
    validate_url,
)

logger = logging.getLogger(__name__)

B2CCommandId = Literal["BusinessPayment", "SalaryPayment", "PromotionPayment"]

PAYMENT_REQUEST_PATH = "/mpesa/b2c/v1/paymentrequest"


class B2CModule:
    """Send money to a customer. The outcome arrives on ``result_url``."""

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

    async def send(
        self,
        recipient_phone: str,
        amount: float,
        result_url: str,
        queue_timeout_url: str,
        remarks: str,
        *,
        occasion: str | None = None,
        command_id: B2CCommandId = "BusinessPayment",
        short_code: str | None = None,
    ) -> dict[str, Any]:
        require_non_empty(recipient_phone, "recipientPhone")
        require_positive_amount(amount, "amount")
        validate_url(result_url, "resultUrl")
        validate_url(queue_timeout_url, "queueTimeOutUrl")
        require_non_empty(remarks, "remarks")
        phone = validate_phone(recipient_phone)

        short = short_code or self.short_code
        if not short or not self.initiator_name or not self._security_credential:
            raise MpesaError(
                "B2C requires shortCode, initiatorName, and securityCredential in config",
                kind=ErrorKind.VALIDATION,
            )

        body: dict[str, Any] = {
            "InitiatorName": self.initiator_name,
            "SecurityCredential": self._security_credential,
            "CommandID": command_id,
            "Amount": round_amount(amount),
            "PartyA": short,
            "PartyB": phone,
            "Remarks": remarks,
            "QueueTimeOutURL": queue_timeout_url,
            "ResultURL": result_url,
        }
        if occasion:
            body["Occasion"] = occasion

        response = await self._http.post(PAYMENT_REQUEST_PATH, body)
        logger.info("B2C %s requested: amount=%s", command_id, body["Amount"])
        return response
