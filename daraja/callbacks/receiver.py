"""Receive Daraja callbacks over HTTP and dispatch them to typed handlers.

The dispatcher is a single aiohttp handler that owns routing itself: an
exact-match map from path to ``CallbackRoute``. Mount it with
``create_callback_app`` or add ``dispatcher.handle`` to an existing app::

    dispatcher = CallbackDispatcher(
        routes={
            "/mpesa/stk": stk_push_route(on_stk),
            "/mpesa/c2b/validation": c2b_validation_route(on_validate),
        }
    )
    app = create_callback_app(dispatcher)

Daraja does not care about the response for most callbacks, but the C2B
validation URL must answer ``{"ResultCode": 0|1, "ResultDesc": ...}``; a
handler does that by returning ``VALIDATION_ACCEPT``/``VALIDATION_REJECT``
or a ``CallbackResponse``.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from aiohttp import web

from daraja.callbacks.models import (
    C2BConfirmation,
    C2BValidation,
    CallbackResponse,
    ResultCallback,
    StkPushCallback,
    ValidationResponse,
)
from daraja.callbacks.parsers import (
    parse_c2b_confirmation,
    parse_c2b_validation,
    parse_result,
    parse_stk_push_callback,
)
from daraja.errors import ErrorKind, MpesaError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResponseBody = str | dict[str, Any]
HandlerResult = CallbackResponse | ValidationResponse | None
# Handlers may be plain functions or coroutines.
CallbackHandler = Callable[[T], HandlerResult | Awaitable[HandlerResult]]
NotFoundHook = Callable[[web.Request], web.StreamResponse | Awaitable[web.StreamResponse]]
ParseErrorHook = Callable[
    [MpesaError, web.Request], web.StreamResponse | Awaitable[web.StreamResponse]
]


@dataclass(frozen=True)
class CallbackRoute(Generic[T]):
    """A validator paired with the business handler that receives its output."""

    parse: Callable[[Any], T]
    handler: CallbackHandler[T]


def make_response(status: int, body: ResponseBody) -> web.Response:
    """JSON for dict bodies, plain text for strings."""
    if isinstance(body, dict):
        return web.json_response(body, status=status)
    return web.Response(status=status, text=body, content_type="text/plain")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CallbackDispatcher:
    """Path-keyed webhook dispatcher for Daraja callbacks.

    Args:
        routes: Exact request path (no query string) to route. Read-only
            after construction.
        success_status: Status sent when a handler returns nothing.
        success_body: Body sent when a handler returns nothing.
        on_not_found: Called for non-POST requests and unknown paths
            instead of the default 404.
        on_parse_error: Called for malformed JSON and for callback
            validation failures instead of the default 400.
    """

    def __init__(
        self,
        routes: Mapping[str, CallbackRoute[Any]],
        *,
        success_status: int = 200,
        success_body: ResponseBody = "OK",
        on_not_found: NotFoundHook | None = None,
        on_parse_error: ParseErrorHook | None = None,
    ) -> None:
        self._routes: Mapping[str, CallbackRoute[Any]] = MappingProxyType(dict(routes))
        self.success_status = success_status
        self.success_body = success_body
        self._on_not_found = on_not_found
        self._on_parse_error = on_parse_error

    @property
    def routes(self) -> Mapping[str, CallbackRoute[Any]]:
        return self._routes

    @property
    def paths(self) -> list[str]:
        return list(self._routes)

    async def _not_found(self, request: web.Request) -> web.StreamResponse:
        if self._on_not_found is not None:
            return await _resolve(self._on_not_found(request))
        return make_response(404, "Not Found")

    async def handle(self, request: web.Request) -> web.StreamResponse:
        """Run one callback through read -> parse -> validate -> handle -> respond."""
        if request.method != "POST":
            logger.warning("Callback 404: method=%s path=%s", request.method, request.path)
            return await self._not_found(request)

        # Matched on the raw (still percent-encoded) path, without the query string.
        path = request.raw_path.split("?", 1)[0]
        route = self._routes.get(path)
        if route is None:
            logger.warning("Callback 404: no route for path=%s", path)
            return await self._not_found(request)

        text = await request.text()
        try:
            raw = json.loads(text) if text else None
        except (ValueError, RecursionError):
            logger.warning("Callback bad request: invalid JSON (path=%s)", path)
            if self._on_parse_error is not None:
                error = MpesaError("Invalid JSON body", kind=ErrorKind.CALLBACK)
                return await _resolve(self._on_parse_error(error, request))
            return make_response(400, "Bad Request: invalid JSON")

        try:
            payload = route.parse(raw)
        except MpesaError as exc:
            if exc.kind is not ErrorKind.CALLBACK:
                logger.warning("Callback rejected: %s (path=%s)", exc, path)
                return make_response(400, "Bad Request: invalid callback body")
            logger.warning("Callback rejected: %s (path=%s)", exc.message, path)
            if self._on_parse_error is not None:
                return await _resolve(self._on_parse_error(exc, request))
            return make_response(400, {"error": exc.message})
        except Exception:
            logger.warning("Callback validator failed (path=%s)", path, exc_info=True)
            return make_response(400, "Bad Request: invalid callback body")

        logger.info("Callback received: path=%s, kind=%s", path, type(payload).__name__)

        try:
            result = await _resolve(route.handler(payload))
        except Exception:
            logger.exception("Callback handler failed: path=%s", path)
            return make_response(500, "Internal Server Error")

        return self._response_for(result)

    def _response_for(self, result: Any) -> web.Response:
        if isinstance(result, ValidationResponse):
            return make_response(self.success_status, result.to_dict())
        if isinstance(result, CallbackResponse):
            status = result.status_code if result.status_code is not None else self.success_status
            body = result.body if result.body is not None else self.success_body
            return make_response(status, body)
        return make_response(self.success_status, self.success_body)


def create_callback_app(dispatcher: CallbackDispatcher) -> web.Application:
    """Build an aiohttp app that sends every request through *dispatcher*."""
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", dispatcher.handle)
    return app


# -- Route builders ----------------------------------------------------------


def stk_push_route(handler: CallbackHandler[StkPushCallback]) -> CallbackRoute[StkPushCallback]:
    return CallbackRoute(parse=parse_stk_push_callback, handler=handler)


def c2b_confirmation_route(
    handler: CallbackHandler[C2BConfirmation],
) -> CallbackRoute[C2BConfirmation]:
    return CallbackRoute(parse=parse_c2b_confirmation, handler=handler)


def c2b_validation_route(
    handler: CallbackHandler[C2BValidation],
) -> CallbackRoute[C2BValidation]:
    """Return ``VALIDATION_ACCEPT``/``VALIDATION_REJECT`` from *handler* so Daraja
    gets the ResultCode/ResultDesc body it needs."""
    return CallbackRoute(parse=parse_c2b_validation, handler=handler)


def result_route(handler: CallbackHandler[ResultCallback]) -> CallbackRoute[ResultCallback]:
    """B2C, account balance and transaction status results."""
    return CallbackRoute(parse=parse_result, handler=handler)
