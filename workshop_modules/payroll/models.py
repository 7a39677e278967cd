"""
Payroll Domain Models (``workshop_modules.payroll.models``).

Responsibility
--------------
Frozen value objects for the payroll facade: the per-worker input of a
payroll run, per-worker results and the run summary.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Money is ``Decimal``, never ``float``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workshop_engines.attendance import AttendanceSummary
from workshop_engines.payroll_aggregation import PayPeriodAggregate, PayrollEvent
from workshop_kernel.domain.pay_period import PayPeriodInfo


@dataclass(frozen=True)
class WorkerPayrollInput:
    """Snapshot of one worker's payroll data for a calculation."""

    user_id: str
    base_salary: Decimal
    events: tuple[PayrollEvent, ...] = ()
    attendance: Mapping[date, AttendanceSummary] = field(
        default_factory=dict, hash=False
    )


@dataclass(frozen=True)
class PeriodCalculation:
    """Aggregate computed for a period and the row it was stored as."""

    aggregate: PayPeriodAggregate
    period: PayPeriodInfo


class PayrollItemStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PayrollItemResult:
    """Outcome for one worker in a payroll run.

    Each worker runs in its own SAVEPOINT; a failure is recorded here and
    does not abort the run.
    """

    item_index: int
    user_id: str
    status: PayrollItemStatus
    period_key: str | None = None
    final_amount: Decimal | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status is PayrollItemStatus.SUCCEEDED


@dataclass(frozen=True)
class PayrollRunResult:
    run_id: UUID
    total_items: int
    succeeded: int
    failed: int
    item_results: tuple[PayrollItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def failed_items(self) -> tuple[PayrollItemResult, ...]:
        return tuple(r for r in self.item_results if not r.is_success)
