"""C2B: register confirmation/validation URLs and simulate payments (sandbox)."""

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

ResponseType = Literal["Completed", "Cancelled"]
CommandId = Literal["CustomerPayBillOnline", "CustomerBuyGoodsOnline"]

REGISTER_URL_PATH = "/mpesa/c2b/v1/registerurl"
SIMULATE_PATH = "/mpesa/c2b/v1/simulate"


class C2BModule:
    def __init__(self, http: HttpClient, short_code: str) -> None:
        self._http = http
        self.short_code = short_code

    def _short(self, short_code: str | None, action: str) -> str:
        short = short_code or self.short_code
        if not short:
            raise MpesaError(f"C2B {action} requires shortCode in config", kind=ErrorKind.VALIDATION)
        return short

    async def register_urls(
        self,
        confirmation_url: str,
        validation_url: str,
        *,
        response_type: ResponseType = "Completed",
        short_code: str | None = None,
    ) -> dict[str, Any]:
        """Register the Confirmation and Validation URLs for a shortcode.

        ``response_type`` is what Daraja does when the validation URL is
        unreachable.
        """
        validate_url(confirmation_url, "confirmationUrl")
        validate_url(validation_url, "validationUrl")
        short = self._short(short_code, "registerUrls")

        body = {
            "ShortCode": short,
            "ResponseType": response_type,
            "ConfirmationURL": confirmation_url,
            "ValidationURL": validation_url,
        }
        response = await self._http.post(REGISTER_URL_PATH, body)
        logger.info("C2B URLs registered for short_code=%s", short)
        return response

    async def simulate(
        self,
        amount: float,
        msisdn: str,
        *,
        bill_ref_number: str | None = None,
        short_code: str | None = None,
        command_id: CommandId = "CustomerPayBillOnline",
    ) -> dict[str, Any]:
        """Simulate a customer payment to the shortcode (sandbox only)."""
        require_positive_amount(amount, "amount")
        require_non_empty(msisdn, "msisdn")
        phone = validate_phone(msisdn)
        short = self._short(short_code, "simulate")

        body: dict[str, Any] = {
            "ShortCode": short,
            "CommandID": command_id,
            "Amount": round_amount(amount),
            "Msisdn": phone,
        }
        if bill_ref_number:
            body["BillRefNumber"] = bill_ref_number

        return await self._http.post(SIMULATE_PATH, body)
