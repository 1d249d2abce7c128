"""Async client for the midas historical-data and trading services."""

from midas_client.config.settings import MidasSettings
from midas_client.decoder import decode_envelope, read_envelope
from midas_client.errors import (
    DecodeError,
    InvalidDateError,
    MidasClientError,
    StreamAbortError,
    StreamDecodeError,
    StreamTransportError,
    TransportError,
)
from midas_client.historical import Historical
from midas_client.logging_config import configure_logging
from midas_client.models import (
    ApiResponse,
    BacktestData,
    Instrument,
    LiveData,
    RawEnvelope,
    RetrieveParams,
    Schema,
    Vendor,
)
from midas_client.streaming import (
    ByteAccumulator,
    StreamAccumulator,
    StreamState,
    accumulate_bytes,
    accumulate_envelopes,
)
from midas_client.trading import Trading
from midas_client.utils import date_to_unix_nanos, parse_id_from_message

__all__ = [
    "ApiResponse",
    "BacktestData",
    "ByteAccumulator",
    "DecodeError",
    "Historical",
    "Instrument",
    "InvalidDateError",
    "LiveData",
    "MidasClientError",
    "MidasSettings",
    "RawEnvelope",
    "RetrieveParams",
    "Schema",
    "StreamAbortError",
    "StreamAccumulator",
    "StreamDecodeError",
    "StreamState",
    "StreamTransportError",
    "Trading",
    "TransportError",
    "Vendor",
    "accumulate_bytes",
    "accumulate_envelopes",
    "configure_logging",
    "date_to_unix_nanos",
    "decode_envelope",
    "parse_id_from_message",
    "read_envelope",
]
