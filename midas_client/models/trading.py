"""Backtest and live-session payload models.

The backend owns the full shape of these documents; the client only relies on
the optional id and passes every other field through untouched.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BacktestData(BaseModel):
    """Result document of one backtest run."""

    model_config = ConfigDict(extra="allow")

    backtest_id: int | None = None
    backtest_name: str | None = None


class LiveData(BaseModel):
    """Result document of one live trading session."""

    model_config = ConfigDict(extra="allow")

    live_id: int | None = None
