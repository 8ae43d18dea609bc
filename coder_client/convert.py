"""Conversion helpers between Coder wire values and Python types.

Timestamps travel as RFC 3339 instants in the server's canonical
rendering: fractional seconds without trailing zeros, ``Z`` for UTC and
``+HH:MM`` for any other offset.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

_INSTANT_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_instant(value: str) -> datetime:
    """Decode an RFC 3339 instant into a timezone-aware datetime.

    Fractions finer than a microsecond (the server emits nanoseconds) are
    truncated.

    Raises:
        ValueError: If the value is not an RFC 3339 instant.
    """
    match = _INSTANT_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid instant: {value!r}")

    normalized = match["base"].replace("t", "T")
    if fraction := match["fraction"]:
        normalized += "." + fraction[:6].ljust(6, "0")
    offset = match["offset"]
    normalized += "+00:00" if offset in ("Z", "z") else offset
    return datetime.fromisoformat(normalized)


def format_instant(value: datetime) -> str:
    """Encode a timezone-aware datetime as a canonical RFC 3339 instant.

    Raises:
        ValueError: If the datetime is naive.
    """
    offset = value.utcoffset()
    if offset is None:
        raise ValueError("Cannot encode a naive datetime as an instant")

    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")

    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return text + f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def optional_instant(value: str | None) -> datetime | None:
    """Decode an instant that the server may omit or send as null."""
    if not value:
        return None
    return parse_instant(value)


def optional_instant_str(value: datetime | None) -> str | None:
    if value is None:
        return None
    return format_instant(value)


def optional_uuid(value: Any) -> UUID | None:
    if not value:
        return None
    return UUID(str(value))
