"""Timestamp conversion from ISO-8601 offset date-times to epoch nanoseconds.

Application Insights timestamps carry up to seven fractional digits (100 ns
ticks), one more than `datetime` can hold. The fraction is therefore split
off and kept as an integer tick count while the rest of the string goes
through `datetime.fromisoformat`.

Public Functions:
    parse_timestamp: Parse to (UTC-aware datetime without fraction, ticks)
    to_epoch_nanos: Nanoseconds since the Unix epoch
    to_epoch_nanos_plus_duration: Same, after adding a millisecond duration

Design Invariant:
    Results are always multiples of 100 (tick precision). Timestamps without
    an offset are interpreted as UTC.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Tuple

from ..errors import MalformedTimestampError

__all__ = [
    "TICKS_PER_SECOND",
    "TICKS_PER_MILLISECOND",
    "NANOS_PER_TICK",
    "parse_timestamp",
    "to_epoch_nanos",
    "to_epoch_nanos_plus_duration",
]

TICKS_PER_SECOND = 10_000_000
TICKS_PER_MILLISECOND = 10_000
NANOS_PER_TICK = 100
_TICK_DIGITS = 7

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(ts: str) -> Tuple[datetime, int]:
    """Parse an ISO-8601 date-time into a whole-second datetime plus ticks.

    Fractional digits beyond the seventh are truncated.

    Raises:
        MalformedTimestampError: ts is empty or not an ISO-8601 date-time
    """
    if not isinstance(ts, str) or not ts:
        raise MalformedTimestampError(f"missing or non-string timestamp: {ts!r}")
    base = ts
    ticks = 0
    match = _FRACTION_RE.search(ts)
    if match:
        ticks = int(match.group(1)[:_TICK_DIGITS].ljust(_TICK_DIGITS, "0"))
        base = ts[: match.start()] + ts[match.end():]
    if base.endswith(("Z", "z")):
        base = base[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(base)
    except ValueError as e:
        raise MalformedTimestampError(f"invalid timestamp {ts!r}: {e}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc), ticks


def _ticks_since_epoch(ts: str) -> int:
    dt, ticks = parse_timestamp(ts)
    delta = dt - _EPOCH
    return (
        (delta.days * 86_400 + delta.seconds) * TICKS_PER_SECOND
        + delta.microseconds * 10
        + ticks
    )


def _to_nanos(ts: str, ticks: int) -> int:
    if ticks < 0:
        raise MalformedTimestampError(f"timestamp {ts!r} precedes the Unix epoch")
    return ticks * NANOS_PER_TICK


def to_epoch_nanos(ts: str) -> int:
    """Convert an ISO-8601 timestamp to nanoseconds since 1970-01-01T00:00:00Z."""
    return _to_nanos(ts, _ticks_since_epoch(ts))


def to_epoch_nanos_plus_duration(ts: str, duration_ms: float) -> int:
    """Convert ``ts + duration_ms`` to nanoseconds since the Unix epoch.

    Used for span end times. Fractional milliseconds are honoured down to
    tick precision (rounded to the nearest 100 ns).
    """
    extra = int(round(duration_ms * TICKS_PER_MILLISECOND))
    return _to_nanos(ts, _ticks_since_epoch(ts) + extra)
