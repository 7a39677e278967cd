"""Tests for the calendar module service."""

from datetime import date

from workshop_config.schema import CalendarSettings, WorkshopConfig
from workshop_engines.calendar_layout import ProgressState, ScheduledItem
from workshop_kernel.domain.time_range import TimeRange
from workshop_modules.calendar import CalendarService


def _item(item_id, start, end, **kwargs):
    return ScheduledItem(id=item_id, range=TimeRange(start, end), **kwargs)


class TestMonthView:
    def test_defaults_to_clock_month(self, config, clock):
        view = CalendarService(config=config, clock=clock).month_view([])

        assert (view.year, view.month) == (2024, 3)
        assert len(view.days) == 42
        assert [d.day for d in view.days if d.is_today] == [date(2024, 3, 12)]

    def test_progress_only_for_visible_items(self, config, clock):
        items = [
            _item("running", date(2024, 3, 10), date(2024, 3, 14), title="Pump overhaul"),
            _item("done", date(2024, 3, 1), date(2024, 3, 2), completed=True),
            _item("far", date(2024, 8, 1), date(2024, 8, 2)),
        ]

        view = CalendarService(config=config, clock=clock).month_view(items)

        assert set(view.progress) == {"running", "done"}
        assert view.progress["running"].state is ProgressState.IN_PROGRESS
        assert view.progress["done"].state is ProgressState.COMPLETED

    def test_explicit_month_and_holidays(self, clock):
        config = WorkshopConfig(
            config_id="test",
            version=1,
            calendar=CalendarSettings(holidays=frozenset({date(2024, 5, 1)})),
        )
        view = CalendarService(config=config, clock=clock).month_view([], 2024, 5)

        assert view.month == 5
        assert not any(d.is_today for d in view.days)
        assert [d.day for d in view.days if d.is_holiday] == [date(2024, 5, 1)]

    def test_navigate(self, config, clock):
        assert CalendarService(config=config, clock=clock).navigate(2024, 1, -1) == (2023, 12)
