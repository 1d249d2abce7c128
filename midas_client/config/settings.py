"""Pydantic Settings for the midas client.

Environment variables use the MIDAS_ prefix, e.g.
MIDAS_HISTORICAL_URL=http://localhost:8080. The unprefixed HISTORICAL_URL and
TRADING_URL are accepted as well. Values may also come from a local .env file.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from midas_client.transport import DEFAULT_TIMEOUT_SECONDS


class MidasSettings(BaseSettings):
    """Client configuration validated from environment variables."""

    # Service endpoints
    historical_url: str = Field(
        ...,
        validation_alias=AliasChoices("historical_url", "MIDAS_HISTORICAL_URL", "HISTORICAL_URL"),
    )
    trading_url: str = Field(
        ...,
        validation_alias=AliasChoices("trading_url", "MIDAS_TRADING_URL", "TRADING_URL"),
    )

    # Requests
    request_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    # Logging. The library never configures logging itself; applications pass
    # this to configure_logging(), e.g. configure_logging(settings.log_level).
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "MIDAS_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }
