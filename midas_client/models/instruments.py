"""Instrument payload models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Vendor(str, Enum):
    """Market-data vendors an instrument can be sourced from."""

    DATABENTO = "databento"
    YFINANCE = "yfinance"


class Instrument(BaseModel):
    """A tradable symbol registered with the historical-data service."""

    instrument_id: int | None = None
    ticker: str = Field(..., min_length=1)
    name: str
    vendor: Vendor = Vendor.DATABENTO
    stype: str | None = None
    dataset: str | None = None
    first_available: int = 0
    last_available: int = 0
    active: bool = True
