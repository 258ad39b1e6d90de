"""STK Push (Lipa Na M-Pesa Online) and STK Query."""

from __future__ import annotations

import logging
from typing import Any, Literal

from daraja.errors import ErrorKind, MpesaError
from daraja.http import HttpClient
from daraja.utils.stk import get_stk_password, get_timestamp
from daraja.utils.validation import (
    require_non_empty,
    require_positive_amount,
    round_amount,
    validate_phone,
    validate_url,
)

logger = logging.getLogger(__name__)

TransactionType = Literal["CustomerPayBillOnline", "CustomerBuyGoodsOnline"]

STK_PUSH_PATH = "/mpesa/stkpush/v1/processrequest"
STK_QUERY_PATH = "/mpesa/stkpushquery/v1/query"


class StkModule:
    """Push-to-pay prompts and their status queries."""

    def __init__(self, http: HttpClient, short_code: str, pass_key: str) -> None:
        self._http = http
        self.short_code = short_code
        self._pass_key = pass_key

    def _require_config(self, short_code: str | None, action: str) -> str:
        short = short_code or self.short_code
        if not short or not self._pass_key:
            raise MpesaError(
                f"{action} requires shortCode and passKey in config or input",
                kind=ErrorKind.VALIDATION,
            )
        return short

    async def push(
        self,
        phone_number: str,
        amount: float,
        callback_url: str,
        account_reference: str,
        transaction_desc: str,
        *,
        short_code: str | None = None,
        transaction_type: TransactionType = "CustomerPayBillOnline",
    ) -> dict[str, Any]:
        """Prompt the customer's phone for their M-Pesa PIN.

        Returns Daraja's response (``CheckoutRequestID`` etc.) plus the
        ``timestamp`` used, which ``query()`` needs to rebuild the password.
        """
        require_non_empty(phone_number, "phoneNumber")
        require_positive_amount(amount, "amount")
        validate_url(callback_url, "callbackUrl")
        require_non_empty(account_reference, "accountReference")
        require_non_empty(transaction_desc, "transactionDesc")
        phone = validate_phone(phone_number)
        short = self._require_config(short_code, "STK Push")

        timestamp = get_timestamp()
        body = {
            "BusinessShortCode": short,
            "Password": get_stk_password(short, self._pass_key, timestamp),
            "Timestamp": timestamp,
            "TransactionType": transaction_type,
            "Amount": round_amount(amount),
            "PartyA": phone,
            "PartyB": short,
            "PhoneNumber": phone,
            "CallBackURL": callback_url,
            "AccountReference": account_reference,
            "TransactionDesc": transaction_desc,
        }

        response = await self._http.post(STK_PUSH_PATH, body)
        logger.info("STK push sent: short_code=%s, amount=%s", short, body["Amount"])
        return {**(response or {}), "timestamp": timestamp}

    async def query(
        self,
        checkout_request_id: str,
        *,
        timestamp: str | None = None,
        short_code: str | None = None,
    ) -> dict[str, Any]:
        """Query an STK push by ``CheckoutRequestID``.

        Pass the ``timestamp`` returned by ``push()`` so the password matches.
        """
        require_non_empty(checkout_request_id, "checkoutRequestId")
        short = self._require_config(short_code, "STK Query")

        timestamp = timestamp or get_timestamp()
        body = {
            "BusinessShortCode": short,
            "Password": get_stk_password(short, self._pass_key, timestamp),
            "Timestamp": timestamp,
            "CheckoutRequestID": checkout_request_id,
        }
        return await self._http.post(STK_QUERY_PATH, body)
