"""Chunked-response accumulation for bulk transfers.

Bulk upload endpoints answer with a chunked body that is not one JSON
document but a sequence of independent envelopes, each reporting progress or
a terminal result. Bulk download endpoints answer with raw record bytes.

State machine (both accumulators):
- Reading → Terminated: an envelope fragment with status != "success"
- Reading → Completed: the stream ends cleanly
- Reading → Failed: a fragment cannot be decoded, the stream ends inside a
  fragment, or the connection fails mid-stream

Fragments are processed strictly in arrival order. The last successful
fragment wins; the first failing fragment stops consumption.
"""

from __future__ import annotations

import codecs
import logging
import re
from enum import Enum
from http import HTTPStatus
from typing import AsyncIterator

import httpx

from midas_client.decoder import decode_envelope
from midas_client.errors import DecodeError, StreamDecodeError, StreamTransportError
from midas_client.models.envelope import STATUS_FAILED, STATUS_SUCCESS, ApiResponse

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "no valid response received"

# Characters that change nesting depth or string state.
_STRUCTURAL = re.compile(r'[{}\[\]"\\]')
_NON_WHITESPACE = re.compile(r"[^ \t\n\r]")


class StreamState(str, Enum):
    """Accumulator states."""

    READING = "reading"
    TERMINATED = "terminated"
    COMPLETED = "completed"
    FAILED = "failed"


def no_response(envelope_type: type[ApiResponse]) -> ApiResponse:
    """Failure envelope for a stream that delivered nothing usable."""
    return envelope_type.with_default(
        STATUS_FAILED, NO_RESPONSE_MESSAGE, HTTPStatus.NOT_FOUND.value
    )


class _ObjectScanner:
    """Finds where a top-level JSON object ends, one chunk at a time.

    Nesting and string state carry over between calls, so every character of
    a fragment is looked at once however many chunks it spans.
    """

    def __init__(self) -> None:
        self._depth = 0
        self._in_string = False
        self._escape_next = False

    def scan(self, text: str, start: int = 0) -> int | None:
        """Index just past the end of the open object, or None if ``text`` does not close it."""
        if start >= len(text):
            return None
        skip = start if self._escape_next else -1
        self._escape_next = False
        for match in _STRUCTURAL.finditer(text, start):
            i = match.start()
            if i == skip:
                continue
            ch = match.group()
            if self._in_string:
                if ch == "\\":
                    skip = i + 1
                    self._escape_next = skip == len(text)
                elif ch == '"':
                    self._in_string = False
            elif ch == '"':
                self._in_string = True
            elif ch in "{[":
                self._depth += 1
            elif ch in "}]":
                self._depth -= 1
                if self._depth == 0:
                    return i + 1
        return None


class _Accumulator:
    def __init__(self) -> None:
        self.state = StreamState.READING
        self.error: Exception | None = None

    @property
    def done(self) -> bool:
        return self.state is not StreamState.READING

    def _require_reading(self) -> None:
        if self.state is not StreamState.READING:
            raise RuntimeError(f"Accumulator is already {self.state.value}")

    def _abort(self, error: Exception) -> Exception:
        self.state = StreamState.FAILED
        self.error = error
        return error

    def fail(self, exc: BaseException) -> StreamTransportError:
        """Record a transport failure while reading; returns the error to raise."""
        self._require_reading()
        error = StreamTransportError(
            f"Connection failed mid-stream: {exc}", **self._progress()
        )
        logger.warning("Streamed response aborted: %s", exc, extra=self._progress())
        self._abort(error)
        return error

    def _progress(self) -> dict:
        return {}


class StreamAccumulator(_Accumulator):
    """Consumes a body made of concatenated JSON envelopes.

    Chunk boundaries are not assumed to line up with fragment boundaries: a
    fragment may span several chunks and a chunk may carry several fragments.
    """

    def __init__(self, envelope_type: type[ApiResponse] = ApiResponse[str]) -> None:
        super().__init__()
        self.envelope_type = envelope_type
        self.fragments = 0
        self.last_success: ApiResponse | None = None
        self.result: ApiResponse | None = None
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        # Pieces of the fragment still waiting for its closing brace.
        self._parts: list[str] = []
        self._scanner = _ObjectScanner()

    def _progress(self) -> dict:
        return {"fragments": self.fragments}

    def feed(self, chunk: bytes) -> StreamState:
        """Process one chunk and return the resulting state."""
        self._require_reading()
        try:
            text = self._utf8.decode(chunk)
        except UnicodeDecodeError as exc:
            raise self._abort(
                StreamDecodeError("Streamed response is not valid UTF-8", **self._progress())
            ) from exc
        self._consume(text)
        return self.state

    def finish(self) -> ApiResponse:
        """Signal end of stream and return the aggregate envelope."""
        if self.state in (StreamState.TERMINATED, StreamState.COMPLETED):
            return self.result
        self._require_reading()

        try:
            text = self._utf8.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise self._abort(
                StreamDecodeError("Streamed response ended inside a UTF-8 sequence", **self._progress())
            ) from exc
        self._consume(text)
        if self.state is StreamState.TERMINATED:
            return self.result
        if self._parts:
            raise self._abort(self._malformed("truncated fragment"))

        self.state = StreamState.COMPLETED
        if self.last_success is None:
            logger.warning("Streamed response ended without a valid fragment")
            self.result = no_response(self.envelope_type)
        else:
            self.result = self.last_success
        return self.result

    def _consume(self, text: str) -> None:
        pos = 0
        while self.state is StreamState.READING:
            if not self._parts:
                start = _NON_WHITESPACE.search(text, pos)
                if start is None:
                    return
                pos = start.start()
                if text[pos] != "{":
                    raise self._abort(self._malformed("expected a JSON object"))

            end = self._scanner.scan(text, pos)
            if end is None:
                if pos < len(text):
                    self._parts.append(text[pos:])
                return

            self._parts.append(text[pos:end])
            fragment_text = "".join(self._parts)
            self._parts = []
            pos = end
            self._apply(fragment_text)

    def _malformed(self, reason: str) -> StreamDecodeError:
        return StreamDecodeError(
            f"Malformed fragment in streamed response: {reason}", **self._progress()
        )

    def _apply(self, fragment_text: str) -> None:
        try:
            fragment = decode_envelope(fragment_text, self.envelope_type)
        except DecodeError as exc:
            raise self._abort(
                StreamDecodeError(exc.message, **self._progress(), **exc.details)
            ) from exc

        self.fragments += 1
        if fragment.status != STATUS_SUCCESS:
            logger.warning(
                "Streamed response terminated by %s fragment: %s",
                fragment.status,
                fragment.message,
                extra={
                    "envelope_status": fragment.status,
                    "envelope_code": fragment.code,
                    "fragments": self.fragments,
                },
            )
            self.state = StreamState.TERMINATED
            self.result = fragment
            return

        logger.debug("Fragment %d: %s", self.fragments, fragment.message)
        self.last_success = fragment


class ByteAccumulator(_Accumulator):
    """Assembles a raw download body into a single ApiResponse[bytes]."""

    def __init__(self) -> None:
        super().__init__()
        self.chunks = 0
        self.result: ApiResponse[bytes] | None = None
        self._buffer = bytearray()

    @property
    def bytes_received(self) -> int:
        return len(self._buffer)

    def _progress(self) -> dict:
        return {"bytes_received": self.bytes_received}

    def feed(self, chunk: bytes) -> StreamState:
        self._require_reading()
        self._buffer.extend(chunk)
        self.chunks += 1
        return self.state

    def finish(self) -> ApiResponse[bytes]:
        if self.state is StreamState.COMPLETED:
            return self.result
        self._require_reading()

        self.state = StreamState.COMPLETED
        if not self._buffer:
            logger.warning("Download ended without any data")
            self.result = no_response(ApiResponse[bytes])
        else:
            self.result = ApiResponse[bytes](
                status=STATUS_SUCCESS,
                message="",
                code=HTTPStatus.OK.value,
                data=bytes(self._buffer),
            )
        return self.result


async def accumulate_envelopes(
    chunks: AsyncIterator[bytes],
    envelope_type: type[ApiResponse] = ApiResponse[str],
) -> ApiResponse:
    """Drive a StreamAccumulator over ``chunks``, stopping at the first terminal state.

    Raises
    ------
    StreamDecodeError
        If a fragment is malformed or the stream ends inside one.
    StreamTransportError
        If the connection fails while chunks are still arriving.
    """
    accumulator = StreamAccumulator(envelope_type)
    try:
        async for chunk in chunks:
            if accumulator.feed(chunk) is not StreamState.READING:
                break
    except httpx.HTTPError as exc:
        raise accumulator.fail(exc) from exc

    result = accumulator.finish()
    logger.info(
        "Streamed response finished (%s)",
        accumulator.state.value,
        extra={
            "envelope_status": result.status,
            "envelope_code": result.code,
            "fragments": accumulator.fragments,
        },
    )
    return result


async def accumulate_bytes(chunks: AsyncIterator[bytes]) -> ApiResponse[bytes]:
    """Drive a ByteAccumulator over ``chunks``.

    Raises
    ------
    StreamTransportError
        If the connection fails before the body is complete.
    """
    accumulator = ByteAccumulator()
    try:
        async for chunk in chunks:
            accumulator.feed(chunk)
    except httpx.HTTPError as exc:
        raise accumulator.fail(exc) from exc

    result = accumulator.finish()
    logger.info(
        "Download finished",
        extra={
            "envelope_status": result.status,
            "bytes_received": accumulator.bytes_received,
        },
    )
    return result
