"""Date conversion and message parsing helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from midas_client.errors import InvalidDateError

_DATE_FORMAT = "%Y-%m-%d"
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRAILING_ID = re.compile(r"(\d+)\s*$")


def date_to_unix_nanos(date_str: str) -> int:
    """Convert ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM:SS`` (UTC) to Unix nanoseconds.

    A date-only string is taken as midnight.
    """
    fmt = _DATE_FORMAT if len(date_str) == 10 else _DATETIME_FORMAT
    try:
        parsed = datetime.strptime(date_str, fmt)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date string '{date_str}'", expected=fmt) from exc

    # Integer arithmetic; float timestamps lose nanosecond precision.
    seconds = int(parsed.replace(tzinfo=timezone.utc).timestamp())
    return seconds * 1_000_000_000


def parse_id_from_message(message: str) -> int | None:
    """Extract the numeric id the backend appends to a status message."""
    match = _TRAILING_ID.search(message)
    if match is None:
        return None
    return int(match.group(1))
