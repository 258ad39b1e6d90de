"""Input validation and STK request helpers."""

from daraja.utils.stk import get_stk_password, get_timestamp
from daraja.utils.validation import (
    normalize_phone,
    require_non_empty,
    require_positive_amount,
    require_positive_int,
    validate_phone,
    validate_url,
)

__all__ = [
    "get_stk_password",
    "get_timestamp",
    "normalize_phone",
    "require_non_empty",
    "require_positive_amount",
    "require_positive_int",
    "validate_phone",
    "validate_url",
]
