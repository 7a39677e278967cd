"""
Clock -- injectable source of "now" and "today".

Responsibility:
    The workshop's notion of the current day drives two things: which pay
    period a payroll run calculates, and which grid cell the calendar marks
    as today.  Both come from a Clock passed in by the caller so a run can be
    replayed for any historical day.

Architecture position:
    Kernel > Domain.  Engines never see a clock; services receive one by
    constructor injection and hand plain dates to the engines.

Invariants enforced:
    - ``now()`` is timezone-aware.
    - ``today()`` is the calendar date of ``now()`` in the clock's local zone,
      so a check-in at 23:30 local time never lands on the next day.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo


class Clock(ABC):
    """Current time for services.  Subclasses only implement ``now()``."""

    local_tz: tzinfo | None = None

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        """Local calendar date; the system zone when ``local_tz`` is None."""
        return self.now().astimezone(self.local_tz).date()


class SystemClock(Clock):
    """Wall-clock time."""

    def __init__(self, local_tz: tzinfo | None = None):
        self.local_tz = local_tz

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Pinned clock for tests and replays.

    ``today()`` uses the pinned time's own zone unless ``local_tz`` is given.
    """

    def __init__(self, fixed_time: datetime | None = None, local_tz: tzinfo | None = None):
        fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        if fixed_time.tzinfo is None:
            raise ValueError("DeterministicClock requires a timezone-aware datetime")
        self._current = fixed_time
        self.local_tz = local_tz or fixed_time.tzinfo

    @classmethod
    def on_day(cls, day: date, hour: int = 12) -> "DeterministicClock":
        """Clock pinned to ``hour`` o'clock UTC on ``day``."""
        return cls(datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._current

    def set_time(self, when: datetime) -> None:
        self._current = when

    def advance(self, delta: timedelta | None = None, *, days: int = 0) -> None:
        self._current += (delta or timedelta()) + timedelta(days=days)
