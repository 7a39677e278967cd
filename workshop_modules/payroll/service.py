"""
Payroll Module Service (``workshop_modules.payroll.service``).

Responsibility
--------------
Payroll facade: builds validated payroll events, resolves the pay period
for a day, runs the pure ``PayrollAggregator`` and stores the result
through the kernel ``PayPeriodService``.  Also runs whole-workshop payroll
batches and confirms payments.

Architecture position
---------------------
**Modules layer** -- thin glue.  Composes ``PayPeriodResolver`` and
``PayrollAggregator`` (engines) with ``PayPeriodService`` (kernel).
Settings come from ``workshop_config.get_active_config()``.

Invariants enforced
-------------------
* Flush-only: the caller owns the transaction (``session_scope()``).
* ``run_payroll`` runs every worker in its own SAVEPOINT; one worker's
  failure is recorded on its item result and never aborts the run.
* A PAID period is never recalculated (``PeriodLockedError``).

Failure modes
-------------
* ``InvalidAmountError`` / ``UnknownEventKindError`` from ``build_event``.
* ``PeriodLockedError`` / ``InvalidStatusTransitionError`` /
  ``PayPeriodNotFoundError`` from calculation and payment.

Audit relevance
---------------
Runs log ``payroll_run_started`` / ``payroll_run_completed`` with counts;
each failed worker logs ``payroll_item_failed`` with its error code.

Usage::

    with session_scope() as session:
        service = PayrollService(session, clock=clock)
        result = service.run_payroll(workers, actor_id=admin_id)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from workshop_config import WorkshopConfig, get_active_config
from workshop_engines.pay_period import PayPeriodResolver
from workshop_engines.payroll_aggregation import (
    HOUR_BASED_KINDS,
    PayPeriodAggregate,
    PayrollAggregator,
    PayrollEvent,
    PayrollEventKind,
    parse_event_kind,
)
from workshop_kernel.db.types import to_decimal
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.pay_period import PayPeriodInfo, PayPeriodStatus, PeriodEventRef
from workshop_kernel.domain.time_range import DateLike, TimeRange, normalize_date
from workshop_kernel.exceptions import InvalidAmountError, PayPeriodNotFoundError
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_kernel.services.pay_period_service import PayPeriodService
from workshop_modules.payroll.lifecycle import (
    ensure_can_mark_paid,
    ensure_can_recalculate,
)
from workshop_modules.payroll.models import (
    PayrollItemResult,
    PayrollItemStatus,
    PayrollRunResult,
    PeriodCalculation,
    WorkerPayrollInput,
)

logger = get_logger("modules.payroll.service")


class PayrollService:
    """
    Public entry point for payroll calculation and payment.

    Contract:
        All writes flush within the caller's transaction.  Reads return
        frozen DTOs.
    """

    def __init__(
        self,
        session: Session,
        config: WorkshopConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()

        settings = self._config.payroll
        self._resolver = PayPeriodResolver(settings.period_anchor_days)
        self._aggregator = PayrollAggregator(
            working_days=settings.working_days_per_period,
            paid_hours_per_day=settings.paid_hours_per_day,
            overtime_multiplier=settings.overtime_multiplier,
            decimal_places=settings.decimal_places,
            holidays=self._config.calendar.holidays,
        )
        self._periods = PayPeriodService(session, self._resolver, self._clock)

    @property
    def resolver(self) -> PayPeriodResolver:
        return self._resolver

    # =========================================================================
    # Events
    # =========================================================================

    def build_event(
        self,
        user_id: str,
        kind: str | PayrollEventKind,
        day: DateLike,
        amount: Decimal | int | str | None = None,
        hours: Decimal | int | str | None = None,
        base_salary: Decimal | None = None,
        description: str = "",
        event_id: str | None = None,
        mission_id: str | None = None,
    ) -> PayrollEvent:
        """
        Validate and build a NEW payroll event.

        For OVERTIME, TARDINESS and EARLY_DEPARTURE the amount may be left
        out; it is then derived from ``hours`` and ``base_salary``.

        Raises:
            UnknownEventKindError: ``kind`` is not a payroll event kind.
            InvalidAmountError: ``amount`` or ``hours`` is negative.
            ValueError: Neither an amount nor enough data to derive one.
        """
        kind = parse_event_kind(kind)
        hours_value = to_decimal(hours) if hours is not None else None
        if hours_value is not None and hours_value < 0:
            raise InvalidAmountError(str(hours_value), event_id)

        if amount is None:
            if kind not in HOUR_BASED_KINDS or hours_value is None:
                raise ValueError(f"{kind.value} event needs an amount")
            if base_salary is None:
                raise ValueError(f"{kind.value} event needs base_salary to price hours")
            value = self._aggregator.amount_for_hours(kind, hours_value, base_salary)
        else:
            value = to_decimal(amount)

        if value < 0:
            raise InvalidAmountError(str(value), event_id)

        return PayrollEvent(
            id=event_id or str(uuid4()),
            user_id=user_id,
            kind=kind,
            amount=value,
            date=normalize_date(day),
            description=description,
            hours=hours_value,
            mission_id=mission_id,
        )

    def repair_legacy_amounts(
        self,
        events: Iterable[PayrollEvent],
    ) -> tuple[tuple[PayrollEvent, ...], int]:
        """Flip negative stored amounts to magnitudes.  Returns (events, changed)."""
        repaired: list[PayrollEvent] = []
        changed = 0
        for event in events:
            if event.amount < 0:
                event = replace(event, amount=abs(event.amount))
                changed += 1
            repaired.append(event)

        if changed:
            logger.info("payroll_amounts_repaired", extra={"repaired_count": changed})
        return tuple(repaired), changed

    # =========================================================================
    # Calculation
    # =========================================================================

    def current_period(self, today: DateLike | None = None) -> TimeRange:
        return self._resolver.resolve(today if today is not None else self._clock.today())

    def aggregate(
        self,
        worker: WorkerPayrollInput,
        period: TimeRange,
    ) -> PayPeriodAggregate:
        """Aggregate without storing anything."""
        return self._aggregator.aggregate(
            user_id=worker.user_id,
            base_salary=worker.base_salary,
            events=worker.events,
            period=period,
            attendance=worker.attendance,
        )

    def calculate_period(
        self,
        worker: WorkerPayrollInput,
        actor_id: UUID,
        today: DateLike | None = None,
        period: TimeRange | None = None,
    ) -> PeriodCalculation:
        """
        Resolve, aggregate and store the worker's period.

        ``period`` wins over ``today``; with neither, the clock's day is used.

        Raises:
            PeriodLockedError: The period is already PAID.
            NonCanonicalPeriodError: ``period`` is not a canonical period.
        """
        period = period or self.current_period(today)

        with LogContext.bind(user_id=worker.user_id, period_key=period.key):
            stored = self._periods.get_period(worker.user_id, period)
            ensure_can_recalculate(
                worker.user_id, period.key, stored.status if stored else None
            )

            aggregate = self.aggregate(worker, period)
            totals = aggregate.totals
            info = self._periods.upsert_calculated(
                user_id=worker.user_id,
                range_=period,
                base_salary=totals.base_salary,
                total_additions=totals.total_additions,
                total_deductions=totals.total_deductions,
                final_amount=totals.final_amount,
                events=[
                    PeriodEventRef(e.id, e.date, e.kind.value, e.magnitude)
                    for e in aggregate.events
                ],
                actor_id=actor_id,
            )
        return PeriodCalculation(aggregate=aggregate, period=info)

    def run_payroll(
        self,
        workers: Sequence[WorkerPayrollInput],
        actor_id: UUID,
        today: DateLike | None = None,
    ) -> PayrollRunResult:
        """
        Calculate the current period for every worker.

        Each worker runs inside ``session.begin_nested()``.  A failing worker
        is rolled back to its savepoint and reported with ``error_code``
        (the exception's ``code``, or ``UNHANDLED_EXCEPTION``).
        """
        run_id = uuid4()
        period = self.current_period(today)
        started_at = self._clock.now()
        t0 = time.monotonic()

        succeeded = 0
        failed = 0
        item_results: list[PayrollItemResult] = []

        with LogContext.bind(run_id=str(run_id), actor_id=str(actor_id)):
            logger.info(
                "payroll_run_started",
                extra={"worker_count": len(workers), "period_key": period.key},
            )

            for index, worker in enumerate(workers):
                savepoint = self._session.begin_nested()
                try:
                    calculation = self.calculate_period(worker, actor_id, period=period)
                    savepoint.commit()
                    succeeded += 1
                    item_results.append(
                        PayrollItemResult(
                            item_index=index,
                            user_id=worker.user_id,
                            status=PayrollItemStatus.SUCCEEDED,
                            period_key=period.key,
                            final_amount=calculation.period.final_amount,
                        )
                    )
                except Exception as exc:
                    savepoint.rollback()
                    failed += 1
                    error_code = getattr(exc, "code", "UNHANDLED_EXCEPTION")
                    logger.warning(
                        "payroll_item_failed",
                        extra={
                            "user_id": worker.user_id,
                            "error_code": error_code,
                            "error_message": str(exc),
                        },
                    )
                    item_results.append(
                        PayrollItemResult(
                            item_index=index,
                            user_id=worker.user_id,
                            status=PayrollItemStatus.FAILED,
                            period_key=period.key,
                            error_code=error_code,
                            error_message=str(exc),
                        )
                    )

            logger.info(
                "payroll_run_completed",
                extra={
                    "succeeded": succeeded,
                    "failed": failed,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )

        return PayrollRunResult(
            run_id=run_id,
            total_items=len(workers),
            succeeded=succeeded,
            failed=failed,
            item_results=tuple(item_results),
            started_at=started_at,
            completed_at=self._clock.now(),
        )

    # =========================================================================
    # Payment
    # =========================================================================

    def confirm_payment(
        self,
        user_id: str,
        period: TimeRange,
        actor_id: UUID,
    ) -> PayPeriodInfo:
        """
        Mark a calculated period as PAID.

        Raises:
            PayPeriodNotFoundError: Nothing stored for (user_id, period).
            PeriodLockedError: Already PAID.
            InvalidStatusTransitionError: Still OPEN.
        """
        stored = self._periods.get_period(user_id, period)
        if stored is None:
            raise PayPeriodNotFoundError(user_id, period.key)
        ensure_can_mark_paid(user_id, period.key, stored.status)
        return self._periods.mark_paid(user_id, period, actor_id)

    def get_period(self, user_id: str, period: TimeRange) -> PayPeriodInfo | None:
        return self._periods.get_period(user_id, period)

    def list_periods(
        self,
        user_id: str,
        status: PayPeriodStatus | None = None,
    ) -> list[PayPeriodInfo]:
        return self._periods.list_periods(user_id, status)

    def periods_between(self, first_day: date, last_day: date) -> list[TimeRange]:
        return self._resolver.periods_between(first_day, last_day)
