"""Request parameters for market-data downloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from midas_client.utils import date_to_unix_nanos


class Schema(str, Enum):
    """Record schemas the download endpoint can serve."""

    MBP1 = "mbp-1"
    TRADES = "trades"
    TBBO = "tbbo"
    BBO1S = "bbo-1s"
    BBO1M = "bbo-1m"
    OHLCV1S = "ohlcv-1s"
    OHLCV1M = "ohlcv-1m"
    OHLCV1H = "ohlcv-1h"
    OHLCV1D = "ohlcv-1d"


class RetrieveParams(BaseModel):
    """Query for a range of records across one or more symbols.

    Timestamps are Unix nanoseconds; ``end_ts`` must not precede ``start_ts``.
    """

    symbols: list[str] = Field(..., min_length=1)
    start_ts: int
    end_ts: int
    schema_: str = Field(..., alias="schema")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_range(self) -> RetrieveParams:
        if self.end_ts < self.start_ts:
            raise ValueError("end_ts must be greater than or equal to start_ts")
        return self

    @classmethod
    def from_dates(
        cls,
        symbols: list[str],
        start: str,
        end: str,
        schema: Schema | str,
    ) -> RetrieveParams:
        """Build params from ``YYYY-MM-DD[ HH:MM:SS]`` strings."""
        return cls(
            symbols=symbols,
            start_ts=date_to_unix_nanos(start),
            end_ts=date_to_unix_nanos(end),
            schema=Schema(schema).value,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
