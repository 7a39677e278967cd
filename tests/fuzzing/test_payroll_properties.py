"""
Property-based tests for pay periods and payroll aggregation.

Verifies:
- Every day resolves to a canonical period that contains it
- final = round(base + additions - deductions), no event dropped
- Aggregation is idempotent
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from workshop_engines.pay_period import PayPeriodResolver
from workshop_engines.payroll_aggregation import (
    EVENT_EFFECTS,
    EventEffect,
    PayrollAggregator,
    PayrollEvent,
    PayrollEventKind,
)
from workshop_kernel.db.types import round_money

RESOLVER = PayPeriodResolver()
PERIOD = RESOLVER.resolve(date(2024, 3, 12))

days = st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31))
amounts = st.decimals(
    min_value=Decimal("-100000"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@st.composite
def period_events(draw):
    count = draw(st.integers(min_value=0, max_value=30))
    return [
        PayrollEvent(
            id=f"e{i}",
            user_id="tech-1",
            kind=draw(st.sampled_from(list(PayrollEventKind))),
            amount=draw(amounts),
            date=PERIOD.start + timedelta(days=draw(st.integers(0, PERIOD.days - 1))),
        )
        for i in range(count)
    ]


class TestResolverProperties:
    @given(day=days)
    @settings(max_examples=300)
    def test_resolved_period_contains_day_and_is_canonical(self, day):
        period = RESOLVER.resolve(day)

        assert period.contains(day)
        assert RESOLVER.is_canonical(period)
        assert 13 <= period.days <= 16

    @given(day=days)
    @settings(max_examples=200)
    def test_neighbours_are_adjacent(self, day):
        period = RESOLVER.resolve(day)

        assert RESOLVER.next_period(period).start == period.end + timedelta(days=1)
        assert RESOLVER.previous_period(period).end == period.start - timedelta(days=1)


class TestAggregationProperties:
    @given(events=period_events(), base=amounts.filter(lambda a: a >= 0))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_final_equals_base_plus_additions_minus_deductions(self, events, base):
        totals = PayrollAggregator().totals(base, events)

        additions = sum(
            (abs(e.amount) for e in events if EVENT_EFFECTS[e.kind] is EventEffect.ADDITION),
            Decimal(0),
        )
        deductions = sum(
            (abs(e.amount) for e in events if EVENT_EFFECTS[e.kind] is EventEffect.DEDUCTION),
            Decimal(0),
        )
        assert totals.total_additions == additions
        assert totals.total_deductions == deductions
        assert totals.final_amount == round_money(base + additions - deductions)
        assert totals.event_count == len(events)

    @given(events=period_events())
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_every_event_lands_on_the_timeline(self, events):
        result = PayrollAggregator().aggregate(
            user_id="tech-1", base_salary=Decimal("1000"), events=events, period=PERIOD
        )

        assert sum(len(day.events) for day in result.timeline) == len(events)
        assert result.excluded_event_count == 0

    @given(events=period_events())
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_idempotent(self, events):
        aggregator = PayrollAggregator()
        first = aggregator.aggregate(
            user_id="tech-1", base_salary=Decimal("1000"), events=events, period=PERIOD
        )
        second = aggregator.aggregate(
            user_id="tech-1", base_salary=Decimal("1000"), events=list(events), period=PERIOD
        )

        assert first.totals == second.totals
        assert first.timeline == second.timeline
