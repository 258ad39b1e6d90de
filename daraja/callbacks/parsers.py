"""Validate raw callback bodies into typed payloads.

Every validator takes whatever ``json.loads`` produced and either returns a
fully populated payload or raises ``MpesaError`` (``ErrorKind.CALLBACK``)
with the offending value in ``response_body``. Required fields are never
defaulted.

Coercion rules:

* objects must be dicts (``None``, lists and scalars fail);
* numbers may be JSON numbers or numeric strings;
* strings accept any scalar and stringify it (``100.0`` becomes ``"100"``);
  ``None`` fails, as do objects and arrays;
* item lists keep only object entries that carry a ``Name`` (or ``Key``).
"""

from __future__ import annotations

import math
import re
from typing import Any

from daraja.callbacks.models import (
    C2BConfirmation,
    C2BValidation,
    CallbackItem,
    CallbackValue,
    ReferenceItem,
    ResultCallback,
    StkPushCallback,
    StkPushMetadata,
    ValidationResponse,
)
from daraja.errors import ErrorKind, MpesaError

# Plain ASCII decimal with optional exponent (no "_" separators or non-ASCII digits).
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def _callback_error(message: str, value: Any) -> MpesaError:
    return MpesaError(message, kind=ErrorKind.CALLBACK, response_body=value)


def expect_object(value: Any, path: str) -> dict[str, Any]:
    if value is None:
        raise _callback_error(f"Missing or invalid callback body: {path}", value)
    if not isinstance(value, dict):
        raise _callback_error(f"Expected object at {path}", value)
    return value


def _to_number(value: Any) -> int | float | None:
    """Lenient numeric conversion; ``None`` when *value* isn't a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_RE.fullmatch(text):
            return None
        number = float(text)
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def expect_number(value: Any, path: str) -> int | float:
    number = _to_number(value)
    if number is None:
        raise _callback_error(f"Expected number at {path}", value)
    return number


def expect_string(value: Any, path: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int | float):
        return str(value)
    if value is None:
        raise _callback_error(f"Missing string at {path}", value)
    raise _callback_error(f"Expected string at {path}", value)


def _optional_string(obj: dict[str, Any], key: str) -> str | None:
    value = obj.get(key)
    return None if value is None else expect_string(value, key)


def _callback_items(value: Any) -> tuple[CallbackItem, ...]:
    items = []
    for entry in value:
        if isinstance(entry, dict) and entry.get("Name") is not None:
            items.append(CallbackItem(name=str(entry["Name"]), value=entry.get("Value")))
    return tuple(items)


def _reference_items(value: Any) -> tuple[ReferenceItem, ...]:
    items = []
    for entry in value:
        if isinstance(entry, dict) and entry.get("Key") is not None:
            items.append(ReferenceItem(key=str(entry["Key"]), value=entry.get("Value")))
    return tuple(items)


def _nested_list(container: Any, key: str) -> list[Any] | None:
    """Return ``container[key]`` if *container* is a dict and the value is a list."""
    if isinstance(container, dict) and isinstance(container.get(key), list):
        return container[key]
    return None


# -- STK push ---------------------------------------------------------------


def parse_stk_push_callback(body: Any) -> StkPushCallback:
    """Validate an STK push callback (``{"Body": {"stkCallback": {...}}}``)."""
    root = expect_object(body, "body")
    outer = expect_object(root.get("Body"), "Body")
    stk = expect_object(outer.get("stkCallback"), "Body.stkCallback")

    items = _nested_list(stk.get("CallbackMetadata"), "Item")

    return StkPushCallback(
        result_code=expect_number(stk.get("ResultCode"), "Body.stkCallback.ResultCode"),
        result_desc=expect_string(stk.get("ResultDesc"), "Body.stkCallback.ResultDesc"),
        merchant_request_id=expect_string(
            stk.get("MerchantRequestID"), "Body.stkCallback.MerchantRequestID"
        ),
        checkout_request_id=expect_string(
            stk.get("CheckoutRequestID"), "Body.stkCallback.CheckoutRequestID"
        ),
        callback_metadata=_callback_items(items) if items is not None else None,
    )


def get_stk_metadata(payload: StkPushCallback) -> StkPushMetadata | None:
    """Flatten a successful STK callback's metadata items.

    Returns ``None`` (rather than raising) when the payment failed, no items
    were sent, or any of Amount, MpesaReceiptNumber, TransactionDate and
    PhoneNumber is missing or unusable.
    """
    if payload.result_code != 0 or not payload.callback_metadata:
        return None

    by_name: dict[str, CallbackValue | None] = {
        item.name: item.value for item in payload.callback_metadata
    }

    amount = _to_number(by_name.get("Amount"))
    receipt = _scalar_text(by_name.get("MpesaReceiptNumber"))
    transaction_date = _scalar_text(by_name.get("TransactionDate"))
    phone_number = _scalar_text(by_name.get("PhoneNumber"))

    if amount is None or not receipt or not transaction_date or not phone_number:
        return None

    return StkPushMetadata(
        amount=amount,
        mpesa_receipt_number=receipt,
        transaction_date=transaction_date,
        phone_number=phone_number,
        balance=_to_number(by_name.get("Balance")),
    )


def _scalar_text(value: Any) -> str:
    if value is None or isinstance(value, dict | list):
        return ""
    return expect_string(value, "")


# -- C2B ----------------------------------------------------------------------


def _c2b_common(o: dict[str, Any]) -> dict[str, Any]:
    return {
        "transaction_type": expect_string(o.get("TransactionType"), "TransactionType"),
        "trans_id": expect_string(o.get("TransID"), "TransID"),
        "trans_time": expect_string(o.get("TransTime"), "TransTime"),
        "trans_amount": expect_string(o.get("TransAmount"), "TransAmount"),
        "business_short_code": expect_string(o.get("BusinessShortCode"), "BusinessShortCode"),
        "bill_ref_number": expect_string(o.get("BillRefNumber"), "BillRefNumber"),
        "msisdn": expect_string(o.get("MSISDN"), "MSISDN"),
        "invoice_number": _optional_string(o, "InvoiceNumber"),
        "first_name": _optional_string(o, "FirstName"),
        "middle_name": _optional_string(o, "MiddleName"),
        "last_name": _optional_string(o, "LastName"),
    }


def parse_c2b_confirmation(body: Any) -> C2BConfirmation:
    """Validate a C2B confirmation (payment completed)."""
    o = expect_object(body, "body")
    return C2BConfirmation(
        **_c2b_common(o),
        org_account_balance=_optional_string(o, "OrgAccountBalance"),
        third_party_trans_id=_optional_string(o, "ThirdPartyTransID"),
    )


def parse_c2b_validation(body: Any) -> C2BValidation:
    """Validate a C2B validation request (payment not yet completed)."""
    return C2BValidation(**_c2b_common(expect_object(body, "body")))


def validation_response(result_code: int, result_desc: str) -> ValidationResponse:
    return ValidationResponse(result_code=result_code, result_desc=result_desc)


VALIDATION_ACCEPT = validation_response(0, "Accept")
VALIDATION_REJECT = validation_response(1, "Reject")


# -- B2C / account balance / transaction status ------------------------------


def parse_result(body: Any) -> ResultCallback:
    """Validate a ``{"Result": {...}}`` callback."""
    root = expect_object(body, "body")
    result = expect_object(root.get("Result"), "Result")

    result_type = result.get("ResultType")
    transaction_id = result.get("TransactionID")
    params = _nested_list(result.get("ResultParameters"), "ResultParameter")
    references = _nested_list(result.get("ReferenceData"), "ReferenceItem")

    return ResultCallback(
        result_code=expect_number(result.get("ResultCode"), "Result.ResultCode"),
        result_desc=expect_string(result.get("ResultDesc"), "Result.ResultDesc"),
        originator_conversation_id=expect_string(
            result.get("OriginatorConversationID"), "Result.OriginatorConversationID"
        ),
        conversation_id=expect_string(result.get("ConversationID"), "Result.ConversationID"),
        result_type=(
            expect_number(result_type, "Result.ResultType") if result_type is not None else None
        ),
        transaction_id=(
            expect_string(transaction_id, "Result.TransactionID")
            if transaction_id is not None
            else None
        ),
        result_parameters=_callback_items(params) if params is not None else None,
        reference_items=_reference_items(references) if references is not None else None,
    )


def get_result_parameters(payload: ResultCallback) -> dict[str, CallbackValue | None]:
    """Result parameters as a flat ``{Name: Value}`` map (empty if none were sent).

    e.g. ``TransactionAmount``, ``TransactionReceipt``,
    ``B2CUtilityAccountAvailableFunds``.
    """
    if not payload.result_parameters:
        return {}
    return {item.name: item.value for item in payload.result_parameters}
