"""Gateway settings loaded from constructor arguments and MPESA_* environment variables."""

import os
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from daraja.errors import ErrorKind, MpesaError

Environment = Literal["sandbox", "production"]

SANDBOX_BASE_URL = "https://sandbox.safaricom.co.ke"
PRODUCTION_BASE_URL = "https://api.safaricom.co.ke"

ENV_PREFIX = "MPESA_"


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


def get_base_url(environment: str) -> str:
    """Return the Daraja host for *environment*."""
    return PRODUCTION_BASE_URL if environment == "production" else SANDBOX_BASE_URL


class Settings(BaseSettings):
    """Daraja configuration.

    Explicit keyword arguments take precedence; anything missing is read
    from ``MPESA_<FIELD>`` in the environment (or ``.env`` outside tests).
    """

    # Credentials (Daraja portal app)
    consumer_key: str = Field(default="")
    consumer_secret: str = Field(default="")
    environment: Environment = Field(default="sandbox")

    # Merchant
    short_code: str = Field(default="")
    pass_key: str = Field(default="")

    # B2C / account balance / transaction status initiator
    initiator_name: str = Field(default="")
    security_credential: str = Field(default="")

    # OAuth token cache
    token_buffer_seconds: int = Field(default=60)

    # Callback server
    callback_host: str = Field(default="0.0.0.0")
    callback_port: int = Field(default=8080)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=_env_file(),
        env_file_encoding="utf-8",
        str_strip_whitespace=True,
        extra="forbid",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: object) -> str:
        # Anything that isn't explicitly production runs against the sandbox.
        if isinstance(value, str) and value.strip().lower() == "production":
            return "production"
        return "sandbox"

    @property
    def base_url(self) -> str:
        return get_base_url(self.environment)

    def require_credentials(self) -> None:
        """Raise a validation error if the consumer key or secret is missing."""
        if not self.consumer_key or not self.consumer_secret:
            raise MpesaError(
                "Missing required credentials: set consumer_key and consumer_secret "
                f"or {ENV_PREFIX}CONSUMER_KEY and {ENV_PREFIX}CONSUMER_SECRET in the environment.",
                kind=ErrorKind.VALIDATION,
            )


settings = Settings()
