"""Clock abstraction and ledger timestamp formatting.

WallClock: real wall-clock time (local host tooling only)
SimClock: deterministic simulated time (tests, replays)

The contract never reads either clock. It only sees the ``TxTimestamp``
that the host stamped on the transaction, converted through
:func:`to_ledger_time`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by hosts to stamp transactions."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """Real wall-clock time. Used by the local CLI host."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SimClock:
    """Simulated clock for deterministic tests.

    Time advances only when explicitly set.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Advance time. Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance(self, seconds: float) -> None:
        """Advance time by seconds."""
        self.set_time(self._time + timedelta(seconds=seconds))


# ---------------------------------------------------------------------------
# Ledger timestamp helpers
# ---------------------------------------------------------------------------

def to_ledger_time(seconds: int, nanos: int) -> datetime:
    """Convert a ``(seconds, nanos)`` transaction timestamp to ledger time.

    Ledger time is UTC truncated to whole seconds, so every party that
    re-executes the transaction derives the same value.  ``nanos`` is
    range-checked but otherwise discarded.
    """
    if not 0 <= nanos < 1_000_000_000:
        raise ValueError(f"nanos out of range: {nanos}")
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as an RFC 3339 UTC string.

    Whole-second values render as ``YYYY-MM-DDTHH:MM:SSZ``; a fractional
    part is appended only when the value carries microseconds.
    """
    if value.tzinfo is None:
        raise ValueError("ledger timestamps must be timezone-aware")
    value = value.astimezone(timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 string into a UTC datetime.

    Accepts a ``Z`` suffix or an explicit offset; naive values are rejected.
    """
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {text!r}")
    return value.astimezone(timezone.utc)
