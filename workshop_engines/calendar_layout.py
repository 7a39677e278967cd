"""
Module: workshop_engines.calendar_layout
Responsibility:
    Lay out multi-day scheduled items (missions) on a Monday-aligned month
    grid.  Each item is cut into one segment per week it touches; segments
    carry a lane so overlapping items stack instead of colliding.  Also
    provides the pure helpers behind month navigation, the day cells of the
    grid and mission progress.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    "Today" is always a parameter; the grid size is passed in by the
    caller (from ``calendar.weeks_in_grid``).

Invariants enforced:
    - One lane state is threaded through every window of a layout, so an
      item spanning several weeks keeps one lane.
    - No two segments in the same week share a lane and a day.
    - Identical input yields an identical ``MonthLayout``.

Failure modes:
    - InvalidRangeError for a week window that is not 7 Monday-aligned days.
    - ValueError on duplicate item ids or an out-of-range month.

Usage:
    engine = CalendarLayoutEngine()
    layout = engine.layout_month(items, 2024, 3)
    for segment in layout.segments_for_week(0):
        ...
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from workshop_kernel.db.types import round_money
from workshop_kernel.domain.time_range import TimeRange, clip, overlaps
from workshop_kernel.exceptions import InvalidRangeError
from workshop_kernel.logging_config import get_logger
from workshop_engines.lanes import LaneAllocator, LaneAllocatorState, LaneCandidate
from workshop_engines.tracer import traced_engine

logger = get_logger("engines.calendar_layout")

DEFAULT_WEEKS_IN_GRID = 6
DAYS_PER_WEEK = 7


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduledItem:
    """
    A dated item shown on the calendar, e.g. a mission.

    ``payload`` is opaque to the engine and excluded from equality.
    """

    id: str
    range: TimeRange
    title: str = ""
    participants: tuple[str, ...] = ()
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)
    completed: bool = False


@dataclass(frozen=True)
class WeekWindow:
    """One row of the month grid: seven days starting on a Monday."""

    index: int
    range: TimeRange

    def __post_init__(self) -> None:
        if self.range.days != DAYS_PER_WEEK or self.range.start.weekday() != 0:
            raise InvalidRangeError(
                self.range.start.isoformat(),
                self.range.end.isoformat(),
                reason="week window must be 7 days starting on a Monday",
            )


@dataclass(frozen=True)
class LayoutSegment:
    """The visible piece of one item inside one week row.

    ``start_col`` is the ISO weekday (1 = Monday) of the first visible day.
    ``is_range_start`` / ``is_range_end`` tell the renderer whether the
    item really begins / ends inside this week.
    """

    item_id: str
    week_index: int
    lane: int
    start_col: int
    span: int
    is_range_start: bool
    is_range_end: bool


@dataclass(frozen=True)
class CalendarDay:
    day: date
    in_month: bool
    is_today: bool
    is_weekend: bool
    is_holiday: bool = False


@dataclass(frozen=True)
class MonthLayout:
    """Full layout of one month grid."""

    year: int
    month: int
    windows: tuple[WeekWindow, ...]
    segments: tuple[LayoutSegment, ...]
    lane_counts: tuple[int, ...]

    def segments_for_week(self, week_index: int) -> tuple[LayoutSegment, ...]:
        return tuple(s for s in self.segments if s.week_index == week_index)

    def segments_for_item(self, item_id: str) -> tuple[LayoutSegment, ...]:
        return tuple(s for s in self.segments if s.item_id == item_id)

    @property
    def max_lanes(self) -> int:
        return max(self.lane_counts, default=0)


class ProgressState(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class MissionProgress:
    item_id: str
    state: ProgressState
    percent: Decimal


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1..12, got {month}")


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (negative for backward)."""
    _check_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_grid(
    year: int,
    month: int,
    weeks: int = DEFAULT_WEEKS_IN_GRID,
) -> tuple[WeekWindow, ...]:
    """
    Week windows of the month view, starting the Monday on or before the 1st.

    Days of the adjacent months bleed into the first and last rows.
    """
    _check_month(year, month)
    if weeks <= 0:
        raise ValueError(f"Grid needs at least one week, got {weeks}")
    first = date(year, month, 1)
    grid_start = first - timedelta(days=first.weekday())
    return tuple(
        WeekWindow(
            index=i,
            range=TimeRange(
                grid_start + timedelta(days=i * DAYS_PER_WEEK),
                grid_start + timedelta(days=i * DAYS_PER_WEEK + DAYS_PER_WEEK - 1),
            ),
        )
        for i in range(weeks)
    )


def grid_days(
    year: int,
    month: int,
    today: date,
    weeks: int = DEFAULT_WEEKS_IN_GRID,
    holidays: frozenset[date] = frozenset(),
) -> tuple[CalendarDay, ...]:
    """Every cell of the grid, row by row."""
    return tuple(
        CalendarDay(
            day=day,
            in_month=(day.year, day.month) == (year, month),
            is_today=day == today,
            is_weekend=day.weekday() >= 5,
            is_holiday=day in holidays,
        )
        for window in month_grid(year, month, weeks)
        for day in window.range.iter_days()
    )


def mission_progress(item: ScheduledItem, today: date) -> MissionProgress:
    """
    Progress of an item as of ``today``.

    Completed and overdue items show 100; items not started show 0.
    In between, the share of elapsed days (0 for a single-day item).
    """
    hundred = Decimal("100")
    start, end = item.range.start, item.range.end

    if item.completed:
        return MissionProgress(item.id, ProgressState.COMPLETED, round_money(hundred))
    if today > end:
        return MissionProgress(item.id, ProgressState.OVERDUE, round_money(hundred))
    if today < start:
        return MissionProgress(item.id, ProgressState.PENDING, round_money(Decimal(0)))

    total = (end - start).days
    if total == 0:
        percent = Decimal(0)
    else:
        percent = Decimal((today - start).days) * hundred / Decimal(total)
    return MissionProgress(item.id, ProgressState.IN_PROGRESS, round_money(percent))


# ---------------------------------------------------------------------------
# Layout engine
# ---------------------------------------------------------------------------


class CalendarLayoutEngine:
    """
    Splits items into per-week segments and assigns lanes.

    Contract:
        ``layout_windows`` expects windows in chronological order; the lane
        state from one window feeds the next.
    """

    def __init__(
        self,
        weeks_in_grid: int = DEFAULT_WEEKS_IN_GRID,
        allocator: LaneAllocator | None = None,
    ):
        self.weeks_in_grid = weeks_in_grid
        self._allocator = allocator or LaneAllocator()

    def layout_month(
        self,
        items: Sequence[ScheduledItem],
        year: int,
        month: int,
    ) -> MonthLayout:
        windows = month_grid(year, month, self.weeks_in_grid)
        segments, lane_counts = self.layout_windows(items=items, windows=windows)
        return MonthLayout(
            year=year,
            month=month,
            windows=windows,
            segments=segments,
            lane_counts=lane_counts,
        )

    @traced_engine("calendar_layout", "1.0", fingerprint_fields=("items", "windows"))
    def layout_windows(
        self,
        items: Sequence[ScheduledItem],
        windows: Sequence[WeekWindow],
    ) -> tuple[tuple[LayoutSegment, ...], tuple[int, ...]]:
        """Segments for every (item, window) overlap plus lanes used per window."""
        ids = [item.id for item in items]
        if len(ids) != len(set(ids)):
            raise ValueError("Scheduled item ids must be unique")

        ordered = sorted(items, key=lambda item: item.range.start)
        state = LaneAllocatorState()
        segments: list[LayoutSegment] = []
        lane_counts: list[int] = []

        for window in sorted(windows, key=lambda w: w.range.start):
            candidates = []
            for item in ordered:
                if not overlaps(item.range, window.range):
                    continue
                candidates.append(
                    LaneCandidate(
                        item_id=item.id,
                        full_range=item.range,
                        clipped_range=clip(item.range, window.range),
                    )
                )

            allocation = self._allocator.allocate(candidates, state)
            state = allocation.state
            lane_counts.append(allocation.lane_count)

            by_id = {c.item_id: c for c in candidates}
            for assignment in allocation.assignments:
                candidate = by_id[assignment.item_id]
                segment = self._segment(window, candidate, assignment.lane)
                if segment is not None:
                    segments.append(segment)

        logger.debug(
            "calendar_laid_out",
            extra={
                "item_count": len(items),
                "window_count": len(lane_counts),
                "segment_count": len(segments),
            },
        )
        return tuple(segments), tuple(lane_counts)

    @staticmethod
    def _segment(
        window: WeekWindow,
        candidate: LaneCandidate,
        lane: int,
    ) -> LayoutSegment | None:
        clipped, full = candidate.clipped_range, candidate.full_range
        start_col = clipped.start.isoweekday()
        span = clipped.end.isoweekday() - start_col + 1
        if span <= 0:
            return None
        return LayoutSegment(
            item_id=candidate.item_id,
            week_index=window.index,
            lane=lane,
            start_col=start_col,
            span=span,
            is_range_start=clipped.start == full.start,
            is_range_end=clipped.end == full.end,
        )
