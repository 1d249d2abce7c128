"""Public models for the midas client."""

from midas_client.models.defaults import Defaultable, default_for, register_default
from midas_client.models.envelope import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    ApiResponse,
    RawEnvelope,
)
from midas_client.models.instruments import Instrument, Vendor
from midas_client.models.params import RetrieveParams, Schema
from midas_client.models.trading import BacktestData, LiveData

__all__ = [
    "ApiResponse",
    "BacktestData",
    "Defaultable",
    "Instrument",
    "LiveData",
    "RawEnvelope",
    "RetrieveParams",
    "STATUS_FAILED",
    "STATUS_SUCCESS",
    "Schema",
    "Vendor",
    "default_for",
    "register_default",
]
