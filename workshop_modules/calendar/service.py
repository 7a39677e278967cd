"""
Calendar Module Service (``workshop_modules.calendar.service``).

Binds configuration and the clock to the pure layout engine so callers can
ask for "this month" without passing grid sizes or today's date around.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from workshop_config import WorkshopConfig, get_active_config
from workshop_engines.calendar_layout import (
    CalendarDay,
    CalendarLayoutEngine,
    MissionProgress,
    MonthLayout,
    ScheduledItem,
    grid_days,
    mission_progress,
    shift_month,
)
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.logging_config import get_logger

logger = get_logger("modules.calendar.service")


@dataclass(frozen=True)
class MonthView:
    """Everything a month screen renders."""

    layout: MonthLayout
    days: tuple[CalendarDay, ...]
    progress: Mapping[str, MissionProgress]

    @property
    def year(self) -> int:
        return self.layout.year

    @property
    def month(self) -> int:
        return self.layout.month


class CalendarService:
    def __init__(
        self,
        config: WorkshopConfig | None = None,
        clock: Clock | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._engine = CalendarLayoutEngine(
            weeks_in_grid=self._config.calendar.weeks_in_grid
        )

    def month_view(
        self,
        items: Sequence[ScheduledItem],
        year: int | None = None,
        month: int | None = None,
    ) -> MonthView:
        """Layout, day cells and progress; defaults to the clock's month."""
        today = self._clock.today()
        year = year if year is not None else today.year
        month = month if month is not None else today.month

        layout = self._engine.layout_month(items, year, month)
        visible = {segment.item_id for segment in layout.segments}
        days = grid_days(
            year,
            month,
            today,
            weeks=self._config.calendar.weeks_in_grid,
            holidays=self._config.calendar.holidays,
        )
        progress = {
            item.id: mission_progress(item, today) for item in items if item.id in visible
        }

        logger.info(
            "month_view_built",
            extra={
                "year": year,
                "month": month,
                "visible_items": len(visible),
                "max_lanes": layout.max_lanes,
            },
        )
        return MonthView(layout=layout, days=days, progress=progress)

    def navigate(self, year: int, month: int, delta: int) -> tuple[int, int]:
        return shift_month(year, month, delta)
