"""Tests for the injectable clocks."""

from datetime import date, datetime, timedelta, timezone

import pytest

from workshop_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:
    def test_pinned(self):
        when = datetime(2024, 3, 12, 8, 30, tzinfo=timezone.utc)
        clock = DeterministicClock(when)

        assert clock.now() == when
        assert clock.now() == clock.now()
        assert clock.today() == date(2024, 3, 12)

    def test_today_follows_local_zone(self):
        late_utc = datetime(2024, 3, 12, 23, 30, tzinfo=timezone.utc)
        clock = DeterministicClock(late_utc, local_tz=timezone(timedelta(hours=3)))

        assert clock.today() == date(2024, 3, 13)

    def test_advance(self):
        clock = DeterministicClock.on_day(date(2024, 3, 20))
        clock.advance(days=1)

        assert clock.today() == date(2024, 3, 21)

        clock.advance(timedelta(hours=6))
        assert clock.now().hour == 18

    def test_naive_time_rejected(self):
        with pytest.raises(ValueError):
            DeterministicClock(datetime(2024, 3, 12, 12))


class TestSystemClock:
    def test_now_is_aware(self):
        assert SystemClock().now().tzinfo is not None

    def test_today_in_utc(self):
        clock = SystemClock(local_tz=timezone.utc)
        assert clock.today() == clock.now().date()
