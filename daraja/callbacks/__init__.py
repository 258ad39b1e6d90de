"""Daraja callbacks: typed payloads, validators and an aiohttp receiver."""

from daraja.callbacks.models import (
    C2BConfirmation,
    C2BValidation,
    CallbackItem,
    CallbackKind,
    CallbackPayload,
    CallbackResponse,
    ReferenceItem,
    ResultCallback,
    StkPushCallback,
    StkPushMetadata,
    ValidationResponse,
)
from daraja.callbacks.parsers import (
    VALIDATION_ACCEPT,
    VALIDATION_REJECT,
    get_result_parameters,
    get_stk_metadata,
    parse_c2b_confirmation,
    parse_c2b_validation,
    parse_result,
    parse_stk_push_callback,
    validation_response,
)
from daraja.callbacks.receiver import (
    CallbackDispatcher,
    CallbackRoute,
    c2b_confirmation_route,
    c2b_validation_route,
    create_callback_app,
    result_route,
    stk_push_route,
)
from daraja.callbacks.server import CallbackServer

__all__ = [
    "C2BConfirmation",
    "C2BValidation",
    "CallbackDispatcher",
    "CallbackItem",
    "CallbackKind",
    "CallbackPayload",
    "CallbackResponse",
    "CallbackRoute",
    "CallbackServer",
    "ReferenceItem",
    "ResultCallback",
    "StkPushCallback",
    "StkPushMetadata",
    "VALIDATION_ACCEPT",
    "VALIDATION_REJECT",
    "ValidationResponse",
    "c2b_confirmation_route",
    "c2b_validation_route",
    "create_callback_app",
    "get_result_parameters",
    "get_stk_metadata",
    "parse_c2b_confirmation",
    "parse_c2b_validation",
    "parse_result",
    "parse_stk_push_callback",
    "result_route",
    "stk_push_route",
    "validation_response",
]
