"""Local input checks for outbound operations.

All failures raise ``MpesaError`` with ``ErrorKind.VALIDATION`` before any
network call is made.
"""

from __future__ import annotations

import math
import re
from typing import Any
from urllib.parse import urlparse

from daraja.errors import ErrorKind, MpesaError

KENYA_PHONE = re.compile(r"^254[17]\d{8}$")
_NON_DIGITS = re.compile(r"\D")


def _fail(message: str) -> MpesaError:
    return MpesaError(message, kind=ErrorKind.VALIDATION)


def normalize_phone(value: str) -> str:
    """Normalize 07XX / 7XX / 2547XX numbers to ``254XXXXXXXXX``.

    Anything unrecognised is returned unchanged so ``validate_phone`` can
    report it.
    """
    digits = _NON_DIGITS.sub("", value)
    if len(digits) == 9 and digits.startswith("7"):
        return f"254{digits}"
    if len(digits) == 10 and digits.startswith("0"):
        return f"254{digits[1:]}"
    if len(digits) == 12 and digits.startswith("254"):
        return digits
    return value


def validate_phone(phone: str) -> str:
    """Return the normalized phone, or raise if it isn't a Kenyan M-Pesa number."""
    normalized = normalize_phone(phone)
    if not KENYA_PHONE.match(normalized):
        raise _fail(f"Invalid phone number: expected Kenya format (254XXXXXXXXX), got: {phone}")
    return normalized


def require_non_empty(value: str | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise _fail(f"Missing or empty required field: {name}")
    return value


def _as_number(value: Any, name: str) -> float:
    if value is None:
        raise _fail(f"Missing required field: {name}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if isinstance(value, bool) or not math.isfinite(number):
        raise _fail(f"{name} must be a number, got: {value}")
    return number


def require_positive_amount(value: Any, name: str) -> float:
    number = _as_number(value, name)
    if number <= 0:
        raise _fail(f"{name} must be a positive number, got: {value}")
    return number


def require_positive_int(value: Any, name: str) -> int:
    number = _as_number(value, name)
    if number < 1 or not number.is_integer():
        raise _fail(f"{name} must be a positive integer, got: {value}")
    return int(number)


def validate_url(value: str | None, name: str) -> str:
    require_non_empty(value, name)
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        raise _fail(f"Invalid URL for {name}: {value}")
    return value


def round_amount(amount: float) -> int:
    """Daraja only accepts whole shillings; round half away from zero."""
    return int(math.floor(amount + 0.5))
