"""Timestamp and password generation for Lipa Na M-Pesa (STK) requests."""

import base64
from datetime import datetime


def get_timestamp(now: datetime | None = None) -> str:
    """Return the request timestamp as ``YYYYMMDDHHmmss`` (local time)."""
    return (now or datetime.now()).strftime("%Y%m%d%H%M%S")


def get_stk_password(short_code: str, pass_key: str, timestamp: str) -> str:
    """``base64(short_code + pass_key + timestamp)``."""
    return base64.b64encode(f"{short_code}{pass_key}{timestamp}".encode()).decode("ascii")
