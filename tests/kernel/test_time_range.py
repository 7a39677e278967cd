"""
Tests for TimeRange and date normalization.

Covers:
- Construction and the start <= end invariant
- Normalization of datetimes and ISO strings to local midnight
- Overlap and clipping
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from workshop_kernel.domain.time_range import TimeRange, clip, normalize_date, overlaps
from workshop_kernel.exceptions import InvalidRangeError


class TestNormalizeDate:
    def test_date_passes_through(self):
        assert normalize_date(date(2024, 3, 5)) == date(2024, 3, 5)

    def test_naive_datetime_drops_time(self):
        assert normalize_date(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)

    def test_aware_datetime_uses_local_date(self):
        value = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)
        assert normalize_date(value) == value.astimezone().date()

    def test_iso_date_string(self):
        assert normalize_date("2024-03-05") == date(2024, 3, 5)

    def test_iso_timestamp_string_keeps_date_part(self):
        assert normalize_date("2024-03-05T08:30:00") == date(2024, 3, 5)

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            normalize_date("next tuesday")

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValueError):
            normalize_date(20240305)


class TestTimeRangeConstruction:
    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            TimeRange(date(2024, 3, 6), date(2024, 3, 5))

        assert exc_info.value.code == "INVALID_RANGE"
        assert exc_info.value.start == "2024-03-06"

    def test_zero_length_range_covers_one_day(self):
        r = TimeRange.single_day("2024-03-05")
        assert r.days == 1
        assert list(r.iter_days()) == [date(2024, 3, 5)]

    def test_strings_normalized(self):
        r = TimeRange("2024-03-06", "2024-03-20T17:00:00")
        assert r.start == date(2024, 3, 6)
        assert r.end == date(2024, 3, 20)

    def test_key_and_str(self):
        r = TimeRange.from_iso("2024-03-06", "2024-03-20")
        assert r.key == "2024-03-06..2024-03-20"
        assert str(r) == r.key

    def test_equal_ranges_hash_equal(self):
        a = TimeRange(date(2024, 3, 6), date(2024, 3, 20))
        b = TimeRange("2024-03-06", "2024-03-20")
        assert a == b
        assert hash(a) == hash(b)

    def test_contains_is_inclusive(self):
        r = TimeRange.from_iso("2024-03-06", "2024-03-20")
        assert r.contains("2024-03-06")
        assert r.contains(date(2024, 3, 20))
        assert not r.contains(date(2024, 3, 21))


class TestOverlapAndClip:
    def setup_method(self):
        self.week = TimeRange.from_iso("2024-03-04", "2024-03-10")

    def test_touching_ranges_overlap(self):
        other = TimeRange.from_iso("2024-03-10", "2024-03-12")
        assert overlaps(self.week, other)
        assert self.week.overlaps(other)

    def test_disjoint_ranges(self):
        other = TimeRange.from_iso("2024-03-11", "2024-03-12")
        assert not overlaps(self.week, other)
        assert clip(other, self.week) is None

    def test_clip_to_window(self):
        item = TimeRange.from_iso("2024-02-28", "2024-03-06")
        assert item.clip(self.week) == TimeRange.from_iso("2024-03-04", "2024-03-06")

    def test_clip_inside_window_is_identity(self):
        item = TimeRange.from_iso("2024-03-05", "2024-03-06")
        assert clip(item, self.week) == item

    def test_iter_days_length_matches_days(self):
        r = TimeRange(date(2024, 2, 21), date(2024, 3, 5))
        days = list(r.iter_days())
        assert len(days) == r.days == 14
        assert days[-1] - days[0] == timedelta(days=13)
