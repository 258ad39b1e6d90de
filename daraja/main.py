"""Run a Daraja callback server that logs every callback it receives.

    python -m daraja.main

Point the STK ``CallBackURL``, the C2B registered URLs and the B2C /
balance / status ``ResultURL``s at the paths below (through a public HTTPS
tunnel or proxy).
"""

import asyncio
import logging

from daraja.callbacks import (
    VALIDATION_ACCEPT,
    C2BConfirmation,
    C2BValidation,
    CallbackDispatcher,
    CallbackServer,
    ResultCallback,
    StkPushCallback,
    ValidationResponse,
    c2b_confirmation_route,
    c2b_validation_route,
    get_result_parameters,
    get_stk_metadata,
    result_route,
    stk_push_route,
)
from daraja.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


async def on_stk_push(payload: StkPushCallback) -> None:
    meta = get_stk_metadata(payload)
    if meta is None:
        logger.info(
            "STK push %s failed: %s (%s)",
            payload.checkout_request_id,
            payload.result_code,
            payload.result_desc,
        )
        return
    logger.info(
        "STK push %s paid: receipt=%s amount=%s",
        payload.checkout_request_id,
        meta.mpesa_receipt_number,
        meta.amount,
    )


async def on_c2b_confirmation(payload: C2BConfirmation) -> None:
    logger.info(
        "C2B payment confirmed: trans_id=%s amount=%s ref=%s",
        payload.trans_id,
        payload.trans_amount,
        payload.bill_ref_number,
    )


async def on_c2b_validation(payload: C2BValidation) -> ValidationResponse:
    logger.info(
        "C2B validation: trans_id=%s amount=%s ref=%s",
        payload.trans_id,
        payload.trans_amount,
        payload.bill_ref_number,
    )
    return VALIDATION_ACCEPT


def _result_logger(label: str):
    async def on_result(payload: ResultCallback) -> None:
        logger.info(
            "%s result %s: %s (%s) params=%s",
            label,
            payload.conversation_id,
            payload.result_code,
            payload.result_desc,
            sorted(get_result_parameters(payload)),
        )

    return on_result


def build_dispatcher() -> CallbackDispatcher:
    return CallbackDispatcher(
        routes={
            "/mpesa/stk": stk_push_route(on_stk_push),
            "/mpesa/c2b/confirmation": c2b_confirmation_route(on_c2b_confirmation),
            "/mpesa/c2b/validation": c2b_validation_route(on_c2b_validation),
            "/mpesa/b2c/result": result_route(_result_logger("B2C")),
            "/mpesa/account-balance/result": result_route(_result_logger("Account balance")),
            "/mpesa/transaction-status/result": result_route(
                _result_logger("Transaction status")
            ),
        }
    )


async def serve() -> None:
    server = CallbackServer(build_dispatcher())
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    logger.info("Starting Daraja callback server (environment=%s)...", settings.environment)
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
