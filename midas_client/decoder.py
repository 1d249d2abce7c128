"""Two-tier envelope decoding.

Tier 1 decodes the body strictly into the caller's ApiResponse[T]. When the
payload does not match (typically a failure response without ``data``),
tier 2 decodes the status-only RawEnvelope and rebuilds ApiResponse[T] with a
default payload. A body matching neither shape raises DecodeError; it is never
turned into a default-valued success.
"""

from __future__ import annotations

import logging
from typing import TypeVar

import httpx
from pydantic import ValidationError

from midas_client.errors import DecodeError, TransportError
from midas_client.models.defaults import is_defaultable
from midas_client.models.envelope import ApiResponse, RawEnvelope

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=ApiResponse)


def _as_text(body: str | bytes) -> str:
    if isinstance(body, str):
        return body
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("Response body is not valid UTF-8", reason=str(exc)) from exc


def decode_typed(text: str, envelope_type: type[E]) -> tuple[E | None, ValidationError | None]:
    """Strict tier: the body must match ApiResponse[T] exactly."""
    try:
        return envelope_type.model_validate_json(text), None
    except ValidationError as exc:
        return None, exc


def decode_raw(text: str) -> tuple[RawEnvelope | None, ValidationError | None]:
    """Fallback tier: status, message and code only."""
    try:
        return RawEnvelope.model_validate_json(text), None
    except ValidationError as exc:
        return None, exc


def decode_envelope(body: str | bytes, envelope_type: type[E]) -> E:
    """Decode a fully buffered body into ``envelope_type``.

    Raises
    ------
    DecodeError
        If the body is neither a typed nor a raw envelope, or only the raw
        envelope matches and the payload type has no default value.
    """
    text = _as_text(body)

    envelope, typed_error = decode_typed(text, envelope_type)
    if envelope is not None:
        return envelope

    raw, raw_error = decode_raw(text)
    if raw is not None:
        payload_type = envelope_type.payload_type()
        if not is_defaultable(payload_type):
            raise DecodeError(
                f"Payload did not match {envelope_type.__name__} and {payload_type!r} has no default value",
                status=raw.status,
                code=raw.code,
                typed_error=str(typed_error),
                body=text[:200],
            )
        logger.debug(
            "Payload did not match %s, rebuilt from status envelope (status=%s code=%d)",
            envelope_type.__name__,
            raw.status,
            raw.code,
        )
        return envelope_type.from_raw(raw)

    raise DecodeError(
        f"Response body does not match {envelope_type.__name__} or the status envelope",
        typed_error=str(typed_error),
        raw_error=str(raw_error),
        body=text[:200],
    )


async def read_envelope(response: httpx.Response, envelope_type: type[E]) -> E:
    """Read a response body to completion and decode it.

    Raises
    ------
    TransportError
        If the body cannot be read.
    DecodeError
        If the body is not a recognizable envelope.
    """
    try:
        body = await response.aread()
    except httpx.HTTPError as exc:
        raise TransportError(f"Failed to read response body: {exc}") from exc
    return decode_envelope(body, envelope_type)
