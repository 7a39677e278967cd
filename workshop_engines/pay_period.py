"""
Module: workshop_engines.pay_period
Responsibility:
    Map a day to the canonical bi-monthly pay period that contains it.
    With the default anchors (5, 20) the periods are:

        day <= 5   ->  [21st of previous month, 5th of this month]
        day <= 20  ->  [6th, 20th of this month]
        otherwise  ->  [21st of this month, 5th of next month]

Architecture position:
    Engines -- pure calculation layer, zero I/O.  "Today" is always a
    parameter; the resolver never reads a clock.

Invariants enforced:
    - Periods tile the calendar: consecutive periods are adjacent, never
      overlap and never leave a gap.
    - The resolved range is the idempotency key of the stored pay period,
      so resolution is a pure function of (day, anchors).

Failure modes:
    - ValueError when anchors do not satisfy ``1 <= first < second <= 27``.
"""

from __future__ import annotations

from datetime import date, timedelta

from workshop_kernel.domain.time_range import DateLike, TimeRange, normalize_date

DEFAULT_ANCHOR_DAYS = (5, 20)


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


class PayPeriodResolver:
    """
    Resolves days to canonical pay periods.

    Anchors stay at or below 27 so every anchor day exists in every month.
    """

    def __init__(self, anchor_days: tuple[int, int] = DEFAULT_ANCHOR_DAYS):
        first, second = anchor_days
        if not 1 <= first < second <= 27:
            raise ValueError(
                f"Anchor days must satisfy 1 <= first < second <= 27, got {anchor_days}"
            )
        self.first_anchor = first
        self.second_anchor = second

    def resolve(self, today: DateLike) -> TimeRange:
        day = normalize_date(today)
        first, second = self.first_anchor, self.second_anchor

        if day.day <= first:
            year, month = _previous_month(day.year, day.month)
            return TimeRange(date(year, month, second + 1), day.replace(day=first))
        if day.day <= second:
            return TimeRange(day.replace(day=first + 1), day.replace(day=second))
        year, month = _next_month(day.year, day.month)
        return TimeRange(day.replace(day=second + 1), date(year, month, first))

    def is_canonical(self, range_: TimeRange) -> bool:
        return self.resolve(range_.start) == range_

    def next_period(self, range_: TimeRange) -> TimeRange:
        return self.resolve(range_.end + timedelta(days=1))

    def previous_period(self, range_: TimeRange) -> TimeRange:
        return self.resolve(range_.start - timedelta(days=1))

    def periods_between(self, first_day: DateLike, last_day: DateLike) -> list[TimeRange]:
        """Every canonical period touching ``[first_day, last_day]``, in order."""
        span = TimeRange(first_day, last_day)
        periods = [self.resolve(span.start)]
        while periods[-1].end < span.end:
            periods.append(self.next_period(periods[-1]))
        return periods


_default_resolver = PayPeriodResolver()


def resolve_pay_period(today: DateLike) -> TimeRange:
    """Resolve with the default (5, 20) anchors."""
    return _default_resolver.resolve(today)


def is_canonical(range_: TimeRange) -> bool:
    return _default_resolver.is_canonical(range_)
