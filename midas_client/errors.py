"""Client error hierarchy.

All client-raised errors extend MidasClientError. Transport and decode errors
are fatal to a call and always propagate to the caller. A business-level
rejection from the backend (duplicate record, not found, validation) is NOT an
error: it comes back as an ordinary ApiResponse with ``status == "failed"``.
"""

from __future__ import annotations


class MidasClientError(Exception):
    """Base error for all client-side failures."""

    message: str = "Client error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class TransportError(MidasClientError):
    """Connection failure, timeout, malformed HTTP or unreadable body."""

    message = "HTTP transport failure"


class DecodeError(MidasClientError):
    """Body is neither a typed envelope nor a raw status envelope."""

    message = "Response body is not a recognizable envelope"


class StreamAbortError(MidasClientError):
    """A chunked transfer was abandoned before reaching a clean end."""

    message = "Stream aborted"


class StreamDecodeError(StreamAbortError, DecodeError):
    """A fragment of a chunked body could not be decoded."""

    message = "Malformed fragment in streamed response"


class StreamTransportError(StreamAbortError, TransportError):
    """The connection failed while chunks were still arriving."""

    message = "Transport failure while reading streamed response"


class InvalidDateError(MidasClientError, ValueError):
    """Date string matches neither YYYY-MM-DD nor YYYY-MM-DD HH:MM:SS."""

    message = "Invalid date string"
