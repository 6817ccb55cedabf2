from __future__ import annotations

from datetime import datetime
from typing import Union

TimestampLike = Union[str, int, float, datetime]


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_punch_timestamp(value: TimestampLike) -> datetime:
    """Normalize a device timestamp into a naive local datetime.

    Accepts datetime objects, ISO-8601 strings (with or without offset, a
    trailing ``Z`` included) and epoch seconds or milliseconds.
    """

    if isinstance(value, datetime):
        return to_local_naive(value)

    if isinstance(value, bool):
        raise TypeError("Unsupported timestamp value: bool")

    if isinstance(value, (int, float)):
        seconds = float(value)
        # Epoch milliseconds are common on the JS side of the wire.
        if seconds > 1e11:
            seconds /= 1000.0
        return datetime.fromtimestamp(seconds)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty timestamp")
        if text.isdigit():
            return parse_punch_timestamp(int(text))
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_local_naive(datetime.fromisoformat(text))

    raise TypeError(f"Unsupported timestamp value type: {type(value)!r}")


def minutes_between(later: datetime, earlier: datetime) -> int:
    """Whole minutes from ``earlier`` to ``later`` (truncated toward zero)."""
    seconds = (later - earlier).total_seconds()
    return int(seconds / 60)
