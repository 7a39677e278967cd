"""
TimeRange -- closed, day-granularity date interval.

Responsibility:
    Normalizes start/end values to calendar dates, computes overlap between
    ranges and clips a range to a window.  Every date that enters the
    calendar or payroll engines passes through ``normalize_date``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ``start <= end`` (closed interval, inclusive on both ends).
    - Local-midnight normalization: any time-of-day component is discarded
      before comparison.  Source data arrives as date-only strings, and a
      lingering time component would shift overlap checks by one day.

Failure modes:
    - InvalidRangeError when end precedes start.
    - ValueError when a value cannot be parsed as a date.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from workshop_kernel.exceptions import InvalidRangeError

DateLike = date | datetime | str


def normalize_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a calendar date at local midnight.

    Accepts ``date``, ``datetime`` (aware values are converted to local
    time first) or an ISO string.  For full ISO timestamps only the date
    part is kept.

    Raises:
        ValueError: if the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10 and text[10] in ("T", " "):
            return normalize_date(datetime.fromisoformat(text))
        return date.fromisoformat(text)
    raise ValueError(f"Cannot interpret {value!r} as a date")


@dataclass(frozen=True, slots=True)
class TimeRange:
    """
    Closed date interval ``[start, end]``.

    Contract:
        Both bounds are normalized with ``normalize_date`` on construction.
    Guarantees:
        - Immutable and hashable.
        - ``start <= end``; a zero-length range covers one day.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        start = normalize_date(self.start)
        end = normalize_date(self.end)
        if end < start:
            raise InvalidRangeError(start.isoformat(), end.isoformat())
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def from_iso(cls, start: str, end: str) -> TimeRange:
        """Build a range from ``YYYY-MM-DD`` strings."""
        return cls(normalize_date(start), normalize_date(end))

    @classmethod
    def single_day(cls, day: DateLike) -> TimeRange:
        d = normalize_date(day)
        return cls(d, d)

    @property
    def days(self) -> int:
        """Number of calendar days covered (inclusive)."""
        return (self.end - self.start).days + 1

    @property
    def key(self) -> str:
        """Stable textual key, e.g. ``2024-03-06..2024-03-20``."""
        return f"{self.start.isoformat()}..{self.end.isoformat()}"

    def contains(self, day: DateLike) -> bool:
        d = normalize_date(day)
        return self.start <= d <= self.end

    def overlaps(self, other: TimeRange) -> bool:
        return overlaps(self, other)

    def clip(self, window: TimeRange) -> TimeRange | None:
        return clip(self, window)

    def iter_days(self) -> Iterator[date]:
        """Yield each day from start to end inclusive."""
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def __str__(self) -> str:
        return self.key


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """True iff the closed ranges share at least one day."""
    return a.start <= b.end and b.start <= a.end


def clip(range_: TimeRange, window: TimeRange) -> TimeRange | None:
    """
    Intersection of ``range_`` with ``window``.

    Returns:
        The overlapping sub-range, or ``None`` when the two are disjoint.
    """
    if not overlaps(range_, window):
        return None
    return TimeRange(max(range_.start, window.start), min(range_.end, window.end))
