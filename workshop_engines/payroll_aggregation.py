"""
Module: workshop_engines.payroll_aggregation
Responsibility:
    Aggregate one worker's payroll events for one pay period into category
    totals, a final payable amount and a per-day timeline.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Called by ``workshop_modules.payroll.service`` which persists the
    totals through ``PayPeriodService``.

Invariants enforced:
    - Every event kind is classified exactly once in ``EVENT_EFFECTS``;
      importing this module fails if a kind is left unclassified.
    - Amounts are magnitudes: the sign comes from the kind, and stored
      negatives from old data are read through ``abs()``.
    - Hour-based event amounts are priced from the exact hourly rate and
      rounded to cents when the event is built.
    - ``final = round(base + sum(additions) - sum(deductions))``, half away
      from zero.
    - Full recomputation on every call; identical input gives identical
      output.

Failure modes:
    - UnknownEventKindError when an event kind cannot be parsed.
    - ValueError when an event belongs to another worker, or when hours are
      requested for a kind that is not paid by the hour.

Usage:
    aggregator = PayrollAggregator()
    aggregate = aggregator.aggregate(
        user_id="tech-1",
        base_salary=Decimal("50000"),
        events=events,
        period=resolve_pay_period(today),
    )
    aggregate.totals.final_amount  # Decimal("51888.89")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from workshop_kernel.db.types import MONEY_DECIMAL_PLACES, round_money, to_decimal
from workshop_kernel.domain.time_range import DateLike, TimeRange, normalize_date
from workshop_kernel.exceptions import UnknownEventKindError
from workshop_kernel.logging_config import get_logger
from workshop_engines.attendance import AttendanceSummary
from workshop_engines.tracer import traced_engine

logger = get_logger("engines.payroll_aggregation")

DEFAULT_WORKING_DAYS = 10
DEFAULT_PAID_HOURS_PER_DAY = 9
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")


# ---------------------------------------------------------------------------
# Event kinds and classification
# ---------------------------------------------------------------------------


class PayrollEventKind(str, Enum):
    BONUS = "BONUS"
    OVERTIME = "OVERTIME"
    ABSENCE = "ABSENCE"
    TARDINESS = "TARDINESS"
    EARLY_DEPARTURE = "EARLY_DEPARTURE"
    LOAN = "LOAN"
    PENALTY = "PENALTY"
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    PERMITTED_LEAVE = "PERMITTED_LEAVE"


class EventEffect(str, Enum):
    ADDITION = "addition"
    DEDUCTION = "deduction"
    NEUTRAL = "neutral"


EVENT_EFFECTS: Mapping[PayrollEventKind, EventEffect] = {
    PayrollEventKind.BONUS: EventEffect.ADDITION,
    PayrollEventKind.OVERTIME: EventEffect.ADDITION,
    PayrollEventKind.ABSENCE: EventEffect.DEDUCTION,
    PayrollEventKind.TARDINESS: EventEffect.DEDUCTION,
    PayrollEventKind.EARLY_DEPARTURE: EventEffect.DEDUCTION,
    PayrollEventKind.LOAN: EventEffect.DEDUCTION,
    PayrollEventKind.PENALTY: EventEffect.DEDUCTION,
    PayrollEventKind.VACATION: EventEffect.NEUTRAL,
    PayrollEventKind.SICK_LEAVE: EventEffect.NEUTRAL,
    PayrollEventKind.PERMITTED_LEAVE: EventEffect.NEUTRAL,
}

# Timeline order within a day: most severe first.
DISPLAY_SEVERITY: Mapping[PayrollEventKind, int] = {
    kind: rank
    for rank, kind in enumerate(
        (
            PayrollEventKind.ABSENCE,
            PayrollEventKind.SICK_LEAVE,
            PayrollEventKind.PENALTY,
            PayrollEventKind.TARDINESS,
            PayrollEventKind.EARLY_DEPARTURE,
            PayrollEventKind.LOAN,
            PayrollEventKind.PERMITTED_LEAVE,
            PayrollEventKind.VACATION,
            PayrollEventKind.OVERTIME,
            PayrollEventKind.BONUS,
        )
    )
}


def _check_exhaustive(table: Mapping[PayrollEventKind, object], name: str) -> None:
    missing = [kind.value for kind in PayrollEventKind if kind not in table]
    if missing:
        raise RuntimeError(f"{name} does not cover event kinds: {', '.join(missing)}")


_check_exhaustive(EVENT_EFFECTS, "EVENT_EFFECTS")
_check_exhaustive(DISPLAY_SEVERITY, "DISPLAY_SEVERITY")

# Storage codes written by the first version of the workshop app.
LEGACY_EVENT_CODES: Mapping[str, PayrollEventKind] = {
    "BONO": PayrollEventKind.BONUS,
    "HORA_EXTRA": PayrollEventKind.OVERTIME,
    "FALTA": PayrollEventKind.ABSENCE,
    "TARDANZA": PayrollEventKind.TARDINESS,
    "APERCIBIMIENTO": PayrollEventKind.PENALTY,
}

HOUR_BASED_KINDS = frozenset(
    {
        PayrollEventKind.OVERTIME,
        PayrollEventKind.TARDINESS,
        PayrollEventKind.EARLY_DEPARTURE,
    }
)


def parse_event_kind(value: str | PayrollEventKind) -> PayrollEventKind:
    """Parse a kind name or legacy code (case-insensitive)."""
    if isinstance(value, PayrollEventKind):
        return value
    code = str(value).strip().upper()
    if code in PayrollEventKind.__members__:
        return PayrollEventKind[code]
    if code in LEGACY_EVENT_CODES:
        return LEGACY_EVENT_CODES[code]
    raise UnknownEventKindError(str(value))


def classify(kind: str | PayrollEventKind) -> EventEffect:
    return EVENT_EFFECTS[parse_event_kind(kind)]


# ---------------------------------------------------------------------------
# Hourly amounts
# ---------------------------------------------------------------------------


def hourly_rate(
    base_salary: Decimal,
    working_days: int = DEFAULT_WORKING_DAYS,
    paid_hours_per_day: int = DEFAULT_PAID_HOURS_PER_DAY,
) -> Decimal:
    """Biweekly base / working days / paid hours.  Not rounded."""
    return to_decimal(base_salary) / Decimal(working_days) / Decimal(paid_hours_per_day)


def amount_for_hours(
    kind: str | PayrollEventKind,
    hours: Decimal,
    base_salary: Decimal,
    working_days: int = DEFAULT_WORKING_DAYS,
    paid_hours_per_day: int = DEFAULT_PAID_HOURS_PER_DAY,
    overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER,
    decimal_places: int = MONEY_DECIMAL_PLACES,
) -> Decimal:
    """
    Amount of an hour-based event, rounded half away from zero.

    OVERTIME pays ``rate * multiplier * hours``; TARDINESS and
    EARLY_DEPARTURE deduct ``rate * hours``.  The rate itself is exact, so
    2 hours on a 50000 base cost 1111.11, not 2 * 555.56.
    """
    kind = parse_event_kind(kind)
    if kind not in HOUR_BASED_KINDS:
        raise ValueError(f"{kind.value} is not paid by the hour")
    rate = hourly_rate(base_salary, working_days, paid_hours_per_day)
    amount = rate * abs(to_decimal(hours))
    if kind is PayrollEventKind.OVERTIME:
        amount *= overtime_multiplier
    return round_money(amount, decimal_places)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollEvent:
    """
    A discrete payroll fact on one day.

    ``amount`` is a magnitude; how it affects pay comes from ``kind``.
    """

    id: str
    user_id: str
    kind: PayrollEventKind
    amount: Decimal
    date: date
    description: str = ""
    hours: Decimal | None = None
    mission_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", parse_event_kind(self.kind))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "date", normalize_date(self.date))
        if self.hours is not None:
            object.__setattr__(self, "hours", to_decimal(self.hours))

    @property
    def effect(self) -> EventEffect:
        return EVENT_EFFECTS[self.kind]

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)

    @property
    def signed_amount(self) -> Decimal:
        if self.effect is EventEffect.ADDITION:
            return self.magnitude
        if self.effect is EventEffect.DEDUCTION:
            return -self.magnitude
        return Decimal(0)


@dataclass(frozen=True)
class TimelineDay:
    day: date
    events: tuple[PayrollEvent, ...] = ()
    attendance: AttendanceSummary | None = None
    is_weekend: bool = False
    is_holiday: bool = False

    @property
    def net(self) -> Decimal:
        return sum((e.signed_amount for e in self.events), Decimal(0))

    @property
    def has_events(self) -> bool:
        return bool(self.events)


@dataclass(frozen=True)
class PayrollTotals:
    """Exact category sums; only ``final_amount`` is rounded."""

    base_salary: Decimal
    total_additions: Decimal
    total_deductions: Decimal
    final_amount: Decimal
    event_count: int
    by_kind: Mapping[PayrollEventKind, Decimal] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class PayPeriodAggregate:
    user_id: str
    period: TimeRange
    totals: PayrollTotals
    timeline: tuple[TimelineDay, ...]
    events: tuple[PayrollEvent, ...]
    excluded_event_count: int = 0

    def day(self, when: DateLike) -> TimelineDay | None:
        target = normalize_date(when)
        for entry in self.timeline:
            if entry.day == target:
                return entry
        return None


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class PayrollAggregator:
    """
    Computes totals and the day-by-day timeline for one worker and period.

    Non-goals:
        - Does NOT resolve which period ``today`` falls in (PayPeriodResolver).
        - Does NOT persist anything.
    """

    def __init__(
        self,
        working_days: int = DEFAULT_WORKING_DAYS,
        paid_hours_per_day: int = DEFAULT_PAID_HOURS_PER_DAY,
        overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER,
        decimal_places: int = 2,
        holidays: frozenset[date] = frozenset(),
    ):
        self.working_days = working_days
        self.paid_hours_per_day = paid_hours_per_day
        self.overtime_multiplier = overtime_multiplier
        self.decimal_places = decimal_places
        self.holidays = holidays

    def hourly_rate(self, base_salary: Decimal) -> Decimal:
        return hourly_rate(base_salary, self.working_days, self.paid_hours_per_day)

    def amount_for_hours(
        self,
        kind: str | PayrollEventKind,
        hours: Decimal,
        base_salary: Decimal,
    ) -> Decimal:
        return amount_for_hours(
            kind,
            hours,
            base_salary,
            self.working_days,
            self.paid_hours_per_day,
            self.overtime_multiplier,
            self.decimal_places,
        )

    def totals(self, base_salary: Decimal, events: Iterable[PayrollEvent]) -> PayrollTotals:
        base = to_decimal(base_salary)
        additions = Decimal(0)
        deductions = Decimal(0)
        by_kind: dict[PayrollEventKind, Decimal] = {}
        count = 0

        for event in events:
            count += 1
            magnitude = event.magnitude
            by_kind[event.kind] = by_kind.get(event.kind, Decimal(0)) + magnitude
            if event.effect is EventEffect.ADDITION:
                additions += magnitude
            elif event.effect is EventEffect.DEDUCTION:
                deductions += magnitude

        return PayrollTotals(
            base_salary=base,
            total_additions=additions,
            total_deductions=deductions,
            final_amount=round_money(base + additions - deductions, self.decimal_places),
            event_count=count,
            by_kind={kind: by_kind[kind] for kind in PayrollEventKind if kind in by_kind},
        )

    def timeline(
        self,
        period: TimeRange,
        events: Sequence[PayrollEvent],
        attendance: Mapping[date, AttendanceSummary] | None = None,
    ) -> tuple[TimelineDay, ...]:
        attendance = attendance or {}
        by_day: dict[date, list[PayrollEvent]] = {}
        for event in events:
            by_day.setdefault(event.date, []).append(event)

        return tuple(
            TimelineDay(
                day=day,
                events=tuple(
                    sorted(by_day.get(day, ()), key=lambda e: DISPLAY_SEVERITY[e.kind])
                ),
                attendance=attendance.get(day),
                is_weekend=day.weekday() >= 5,
                is_holiday=day in self.holidays,
            )
            for day in period.iter_days()
        )

    @traced_engine(
        "payroll_aggregator",
        "1.0",
        fingerprint_fields=("user_id", "base_salary", "events", "period"),
    )
    def aggregate(
        self,
        user_id: str,
        base_salary: Decimal,
        events: Sequence[PayrollEvent],
        period: TimeRange,
        attendance: Mapping[date, AttendanceSummary] | None = None,
    ) -> PayPeriodAggregate:
        """
        Aggregate ``events`` of ``user_id`` within ``period``.

        Events dated outside ``period`` are left out and counted in
        ``excluded_event_count``.

        Raises:
            ValueError: If an event belongs to a different worker.
        """
        included: list[PayrollEvent] = []
        excluded = 0
        for event in events:
            if event.user_id != user_id:
                raise ValueError(
                    f"Event {event.id} belongs to {event.user_id!r}, not {user_id!r}"
                )
            if period.contains(event.date):
                included.append(event)
            else:
                excluded += 1

        totals = self.totals(base_salary, included)
        timeline = self.timeline(period, included, attendance)

        if excluded:
            logger.info(
                "payroll_events_outside_period",
                extra={
                    "user_id": user_id,
                    "period_key": period.key,
                    "excluded_event_count": excluded,
                },
            )

        return PayPeriodAggregate(
            user_id=user_id,
            period=period,
            totals=totals,
            timeline=timeline,
            events=tuple(included),
            excluded_event_count=excluded,
        )
