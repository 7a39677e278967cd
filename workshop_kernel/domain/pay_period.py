"""
Pay-period status and DTOs.

Responsibility:
    Defines the pay-period lifecycle states and the immutable
    ``PayPeriodInfo`` snapshot that crosses the persistence boundary.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``PayPeriodService`` converts ORM rows into ``PayPeriodInfo``; nothing
    outside the service layer sees an ORM entity.

Invariants enforced:
    - Status only advances: OPEN -> CALCULATED -> PAID.  PAID is terminal.
    - A CALCULATED period may be recalculated (full replace of totals and
      of the events it was built from).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workshop_kernel.domain.time_range import TimeRange


class PayPeriodStatus(str, Enum):
    """Lifecycle status of a worker's pay period.

    Contract: Transitions are OPEN -> CALCULATED -> PAID.
    CALCULATED -> CALCULATED is a recalculation.  PAID never changes.
    """

    OPEN = "open"
    CALCULATED = "calculated"
    PAID = "paid"

    @property
    def is_terminal(self) -> bool:
        return self is PayPeriodStatus.PAID

    def can_transition_to(self, target: PayPeriodStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[PayPeriodStatus, frozenset[PayPeriodStatus]] = {
    PayPeriodStatus.OPEN: frozenset({PayPeriodStatus.CALCULATED}),
    PayPeriodStatus.CALCULATED: frozenset(
        {PayPeriodStatus.CALCULATED, PayPeriodStatus.PAID}
    ),
    PayPeriodStatus.PAID: frozenset(),
}


@dataclass(frozen=True)
class PeriodEventRef:
    """An event included in a stored period, as it was when the period was calculated."""

    event_id: str
    day: date
    kind: str
    amount: Decimal


@dataclass(frozen=True)
class PayPeriodInfo:
    """
    Pure domain representation of a stored pay period.

    Guarantees:
        - Immutable (frozen dataclass).
        - ``final_amount`` is ``base_salary + total_additions -
          total_deductions`` rounded half away from zero to cents, as written
          by the aggregation run that produced it.
        - ``events`` are exactly the events that run included, ordered by
          day then id; ``event_count == len(events)``.
    """

    id: UUID
    user_id: str
    range: TimeRange
    base_salary: Decimal
    total_additions: Decimal
    total_deductions: Decimal
    final_amount: Decimal
    event_count: int
    status: PayPeriodStatus
    calculated_at: datetime | None = None
    paid_at: datetime | None = None
    paid_by_id: UUID | None = None
    events: tuple[PeriodEventRef, ...] = ()

    @property
    def event_ids(self) -> tuple[str, ...]:
        return tuple(e.event_id for e in self.events)

    @property
    def is_paid(self) -> bool:
        return self.status is PayPeriodStatus.PAID

    @property
    def period_key(self) -> str:
        return self.range.key
