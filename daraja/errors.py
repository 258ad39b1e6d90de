"""Error type shared by every layer of the SDK.

A single exception class is raised everywhere; ``kind`` tells callers which
boundary produced it::

    try:
        await mpesa.stk_push(...)
    except MpesaError as exc:
        if exc.kind is ErrorKind.AUTH:
            ...
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Which boundary raised the error."""

    AUTH = "MPESA_AUTH_ERROR"
    REQUEST = "MPESA_REQUEST_ERROR"
    VALIDATION = "MPESA_VALIDATION_ERROR"
    CALLBACK = "MPESA_CALLBACK_ERROR"


class MpesaError(Exception):
    """Raised for OAuth, request, input-validation and callback-shape failures.

    Attributes:
        kind: The failing boundary.
        status_code: HTTP status for ``REQUEST`` errors returned by Daraja.
        response_body: Parsed response body (``AUTH``/``REQUEST``) or the
            offending raw value (``CALLBACK``), kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        status_code: int | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.response_body = response_body

    @property
    def code(self) -> str:
        """Stable string code, e.g. ``MPESA_AUTH_ERROR``."""
        return self.kind.value

    def __repr__(self) -> str:
        parts = [f"kind={self.kind.name}", f"message={self.message!r}"]
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code}")
        return f"MpesaError({', '.join(parts)})"
