"""Main entry point for outbound Daraja calls."""

from __future__ import annotations

import logging
from typing import Any

from daraja.auth import AuthProvider
from daraja.config import Settings
from daraja.http import HttpClient
from daraja.operations import (
    AccountModule,
    B2CModule,
    C2BModule,
    StkModule,
    TransactionModule,
)

logger = logging.getLogger(__name__)


class Mpesa:
    """Single entry point for Daraja operations.

    OAuth is handled automatically: one token is cached per instance and
    refreshed shortly before it expires.

    Usage::

        # From MPESA_* environment variables
        mpesa = Mpesa()

        # Or explicitly
        mpesa = Mpesa(
            consumer_key="...",
            consumer_secret="...",
            environment="sandbox",
            short_code="174379",
            pass_key="...",
        )
        res = await mpesa.stk_push(
            phone_number="254708374149",
            amount=10,
            callback_url="https://example.com/mpesa/stk",
            account_reference="order-123",
            transaction_desc="Payment",
        )
    """

    def __init__(self, settings: Settings | None = None, **overrides: Any) -> None:
        if settings is None:
            settings = Settings(**overrides)
        elif overrides:
            settings = Settings(**{**settings.model_dump(), **overrides})
        settings.require_credentials()
        self.settings = settings

        self.auth = AuthProvider(
            settings.consumer_key,
            settings.consumer_secret,
            settings.environment,
            buffer_seconds=settings.token_buffer_seconds,
        )
        self.http = HttpClient(settings.base_url, self.auth.get_token)

        self.stk = StkModule(self.http, settings.short_code, settings.pass_key)
        self.c2b = C2BModule(self.http, settings.short_code)
        self.b2c = B2CModule(
            self.http,
            settings.short_code,
            settings.initiator_name,
            settings.security_credential,
        )
        self.account = AccountModule(
            self.http,
            settings.short_code,
            settings.initiator_name,
            settings.security_credential,
        )
        self.transaction = TransactionModule(
            self.http,
            settings.short_code,
            settings.initiator_name,
            settings.security_credential,
        )
        logger.debug("Mpesa client ready (environment=%s)", settings.environment)

    async def stk_push(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Shortcut for ``self.stk.push``."""
        return await self.stk.push(*args, **kwargs)

    async def stk_query(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Shortcut for ``self.stk.query``."""
        return await self.stk.query(*args, **kwargs)

    def invalidate_token(self) -> None:
        """Force the next call to fetch a new access token."""
        self.auth.invalidate()
