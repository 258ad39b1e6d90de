"""Typed Daraja callback payloads.

Each payload class is tagged with a ``CallbackKind`` so handlers that
accept several kinds can switch on ``payload.kind``. Instances are only
built by the validators in ``daraja.callbacks.parsers``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

# Usually a scalar, but Daraja does not guarantee it, so nested JSON is kept as-is.
CallbackValue = str | int | float | dict[str, Any] | list[Any]


class CallbackKind(Enum):
    STK_PUSH = "stk_push"
    C2B_CONFIRMATION = "c2b_confirmation"
    C2B_VALIDATION = "c2b_validation"
    RESULT = "result"


@dataclass(frozen=True)
class CallbackItem:
    """``{"Name": ..., "Value": ...}`` entry in STK metadata or result parameters.

    Daraja omits ``Value`` for some items (notably ``Balance``), hence ``None``.
    Entries that are not objects or carry no ``Name`` are dropped by the
    validators, so every item here is addressable by name.
    """

    name: str
    value: CallbackValue | None = None


@dataclass(frozen=True)
class ReferenceItem:
    key: str
    value: Any = None


@dataclass(frozen=True)
class StkPushCallback:
    """STK push outcome. ``result_code`` 0 is success; 1032 means the user cancelled."""

    kind: ClassVar[CallbackKind] = CallbackKind.STK_PUSH

    result_code: int | float
    result_desc: str
    merchant_request_id: str
    checkout_request_id: str
    # Only present on success
    callback_metadata: tuple[CallbackItem, ...] | None = None

    @property
    def is_success(self) -> bool:
        return self.result_code == 0


@dataclass(frozen=True)
class StkPushMetadata:
    """Flattened success metadata; see ``get_stk_metadata``."""

    amount: int | float
    mpesa_receipt_number: str
    transaction_date: str
    phone_number: str
    balance: int | float | None = None


@dataclass(frozen=True)
class C2BValidation:
    """Sent to the Validation URL before a C2B payment completes."""

    kind: ClassVar[CallbackKind] = CallbackKind.C2B_VALIDATION

    transaction_type: str
    trans_id: str
    trans_time: str
    trans_amount: str
    business_short_code: str
    bill_ref_number: str
    msisdn: str
    invoice_number: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class C2BConfirmation:
    """Sent to the Confirmation URL once a C2B payment has completed."""

    kind: ClassVar[CallbackKind] = CallbackKind.C2B_CONFIRMATION

    transaction_type: str
    trans_id: str
    trans_time: str
    trans_amount: str
    business_short_code: str
    bill_ref_number: str
    msisdn: str
    invoice_number: str | None = None
    org_account_balance: str | None = None
    third_party_trans_id: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class ResultCallback:
    """``{"Result": {...}}`` envelope used by B2C, account balance and transaction status."""

    kind: ClassVar[CallbackKind] = CallbackKind.RESULT

    result_code: int | float
    result_desc: str
    originator_conversation_id: str
    conversation_id: str
    result_type: int | float | None = None
    transaction_id: str | None = None
    result_parameters: tuple[CallbackItem, ...] | None = None
    reference_items: tuple[ReferenceItem, ...] | None = None

    @property
    def is_success(self) -> bool:
        return self.result_code == 0


@dataclass(frozen=True)
class ValidationResponse:
    """What a C2B validation handler returns to accept or reject a payment."""

    result_code: int
    result_desc: str

    def to_dict(self) -> dict[str, Any]:
        return {"ResultCode": self.result_code, "ResultDesc": self.result_desc}


CallbackPayload = StkPushCallback | C2BConfirmation | C2BValidation | ResultCallback


@dataclass
class CallbackResponse:
    """Handler-supplied override of the dispatcher's default response.

    Unset fields fall back to the dispatcher's success status/body. A dict
    body is sent as JSON, a string as plain text.
    """

    status_code: int | None = None
    body: str | dict[str, Any] | None = field(default=None)
