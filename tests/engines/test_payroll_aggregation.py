"""
Tests for PayrollAggregator.

Covers:
- Classification table and legacy event codes
- Hourly-rate derived amounts
- Totals and the final amount for the reference scenario
- Timeline ordering, flags and attendance
- Out-of-period and foreign-worker events
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from workshop_engines.attendance import AttendanceSummary
from workshop_engines.payroll_aggregation import (
    EVENT_EFFECTS,
    EventEffect,
    PayrollAggregator,
    PayrollEvent,
    PayrollEventKind,
    amount_for_hours,
    classify,
    hourly_rate,
    parse_event_kind,
)
from workshop_kernel.domain.time_range import TimeRange
from workshop_kernel.exceptions import UnknownEventKindError

PERIOD = TimeRange(date(2024, 3, 6), date(2024, 3, 20))
BASE = Decimal("50000")


def _event(event_id, kind, amount, day=date(2024, 3, 12), user_id="tech-1", **kwargs):
    return PayrollEvent(
        id=event_id, user_id=user_id, kind=kind, amount=amount, date=day, **kwargs
    )


class TestClassification:
    def test_every_kind_classified(self):
        assert set(EVENT_EFFECTS) == set(PayrollEventKind)

    @pytest.mark.parametrize(
        "kind, effect",
        [
            ("BONUS", EventEffect.ADDITION),
            ("OVERTIME", EventEffect.ADDITION),
            ("ABSENCE", EventEffect.DEDUCTION),
            ("TARDINESS", EventEffect.DEDUCTION),
            ("EARLY_DEPARTURE", EventEffect.DEDUCTION),
            ("LOAN", EventEffect.DEDUCTION),
            ("PENALTY", EventEffect.DEDUCTION),
            ("VACATION", EventEffect.NEUTRAL),
            ("SICK_LEAVE", EventEffect.NEUTRAL),
            ("PERMITTED_LEAVE", EventEffect.NEUTRAL),
        ],
    )
    def test_effects(self, kind, effect):
        assert classify(kind) is effect

    @pytest.mark.parametrize(
        "code, kind",
        [
            ("BONO", PayrollEventKind.BONUS),
            ("HORA_EXTRA", PayrollEventKind.OVERTIME),
            ("FALTA", PayrollEventKind.ABSENCE),
            ("tardanza", PayrollEventKind.TARDINESS),
            ("APERCIBIMIENTO", PayrollEventKind.PENALTY),
        ],
    )
    def test_legacy_codes(self, code, kind):
        assert parse_event_kind(code) is kind

    def test_unknown_kind(self):
        with pytest.raises(UnknownEventKindError) as exc_info:
            parse_event_kind("GIFT")

        assert exc_info.value.kind == "GIFT"


class TestHourlyAmounts:
    def test_hourly_rate_is_exact(self):
        assert hourly_rate(BASE) == Decimal("50000") / Decimal(90)

    def test_tardiness_priced_from_exact_rate(self):
        assert amount_for_hours("TARDINESS", Decimal("2"), BASE) == Decimal("1111.11")

    def test_single_hour_rounded_to_cents(self):
        assert amount_for_hours("TARDINESS", Decimal("1"), BASE) == Decimal("555.56")

    def test_overtime_uses_multiplier(self):
        amount = amount_for_hours("OVERTIME", Decimal("3"), Decimal("9000"))
        assert amount == Decimal("450.00")

    def test_aggregator_decimal_places(self):
        aggregator = PayrollAggregator(decimal_places=0)
        assert aggregator.amount_for_hours("TARDINESS", Decimal("1"), BASE) == Decimal("556")

    def test_non_hourly_kind_rejected(self):
        with pytest.raises(ValueError):
            amount_for_hours("BONUS", Decimal("1"), BASE)


class TestTotals:
    def setup_method(self):
        self.aggregator = PayrollAggregator()

    def test_reference_scenario(self):
        tardiness = amount_for_hours("TARDINESS", Decimal("2"), BASE)
        events = [
            _event("e1", "BONUS", Decimal("5000")),
            _event("e2", "ABSENCE", Decimal("2000")),
            _event("e3", "TARDINESS", tardiness, hours=Decimal("2")),
        ]

        result = self.aggregator.aggregate(
            user_id="tech-1", base_salary=BASE, events=events, period=PERIOD
        )

        assert result.totals.final_amount == Decimal("51888.89")
        assert result.totals.total_additions == Decimal("5000")
        assert result.totals.event_count == 3

    def test_legacy_negative_amounts_read_as_magnitudes(self):
        events = [_event("e1", "ABSENCE", Decimal("-2000"))]
        totals = self.aggregator.totals(BASE, events)

        assert totals.total_deductions == Decimal("2000")
        assert totals.final_amount == Decimal("48000.00")

    def test_neutral_kinds_do_not_change_pay(self):
        events = [_event("e1", "VACATION", Decimal("700")), _event("e2", "SICK_LEAVE", Decimal("1"))]
        totals = self.aggregator.totals(BASE, events)

        assert totals.final_amount == Decimal("50000.00")
        assert totals.by_kind[PayrollEventKind.VACATION] == Decimal("700")

    def test_final_rounds_half_away_from_zero(self):
        totals = self.aggregator.totals(Decimal("0"), [_event("e1", "PENALTY", Decimal("0.005"))])
        assert totals.final_amount == Decimal("-0.01")

    def test_no_events(self):
        totals = self.aggregator.totals(BASE, [])
        assert totals.final_amount == Decimal("50000.00")
        assert totals.event_count == 0


class TestAggregateScope:
    def setup_method(self):
        self.aggregator = PayrollAggregator()

    def test_out_of_period_events_excluded_and_counted(self):
        events = [
            _event("in", "BONUS", Decimal("10")),
            _event("out", "BONUS", Decimal("99"), day=date(2024, 3, 21)),
        ]
        result = self.aggregator.aggregate(
            user_id="tech-1", base_salary=BASE, events=events, period=PERIOD
        )

        assert result.excluded_event_count == 1
        assert [e.id for e in result.events] == ["in"]
        assert result.totals.final_amount == Decimal("50010.00")

    def test_foreign_worker_event_rejected(self):
        with pytest.raises(ValueError):
            self.aggregator.aggregate(
                user_id="tech-1",
                base_salary=BASE,
                events=[_event("x", "BONUS", Decimal("1"), user_id="tech-2")],
                period=PERIOD,
            )

    def test_identical_input_identical_output(self):
        events = [_event("e1", "BONUS", Decimal("5")), _event("e2", "LOAN", Decimal("3"))]
        first = self.aggregator.aggregate(user_id="tech-1", base_salary=BASE, events=events, period=PERIOD)
        second = self.aggregator.aggregate(user_id="tech-1", base_salary=BASE, events=events, period=PERIOD)

        assert first.totals == second.totals
        assert first.timeline == second.timeline


class TestTimeline:
    def setup_method(self):
        self.aggregator = PayrollAggregator(holidays=frozenset({date(2024, 3, 19)}))

    def test_one_entry_per_day(self):
        timeline = self.aggregator.timeline(PERIOD, [])
        assert len(timeline) == 15
        assert timeline[0].day == PERIOD.start

    def test_severity_order_within_day(self):
        events = [
            _event("bonus", "BONUS", Decimal("1")),
            _event("absence", "ABSENCE", Decimal("1")),
            _event("late", "TARDINESS", Decimal("1")),
        ]
        result = self.aggregator.aggregate(
            user_id="tech-1", base_salary=BASE, events=events, period=PERIOD
        )

        day = result.day("2024-03-12")
        assert [e.id for e in day.events] == ["absence", "late", "bonus"]
        assert day.net == Decimal("-1")

    def test_weekend_and_holiday_flags(self):
        timeline = {d.day: d for d in self.aggregator.timeline(PERIOD, [])}

        assert timeline[date(2024, 3, 9)].is_weekend
        assert not timeline[date(2024, 3, 11)].is_weekend
        assert timeline[date(2024, 3, 19)].is_holiday

    def test_attendance_merged(self):
        summary = AttendanceSummary(
            day=date(2024, 3, 12),
            check_in=datetime(2024, 3, 12, 8, 0),
            check_out=datetime(2024, 3, 12, 17, 0),
            total_hours=Decimal("9.00"),
        )
        timeline = self.aggregator.timeline(PERIOD, [], {date(2024, 3, 12): summary})

        by_day = {d.day: d for d in timeline}
        assert by_day[date(2024, 3, 12)].attendance is summary
        assert by_day[date(2024, 3, 13)].attendance is None
