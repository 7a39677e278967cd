"""
PayPeriodService -- persistence of calculated pay periods and payment.

Responsibility:
    Stores the result of a payroll aggregation run keyed by
    ``(user_id, range)`` and performs the CALCULATED -> PAID transition.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by ``workshop_modules.payroll.service.PayrollService`` after the
    pure aggregator has produced totals.  The canonical-range check is
    delegated to an injected ``PeriodResolver`` so the kernel does not
    import from the engines layer.

Invariants enforced:
    - One row per (user_id, start, end); re-running a calculation replaces
      totals instead of inserting a duplicate.
    - A PAID row is never rewritten (PeriodLockedError).
    - The PAID write is a single conditional UPDATE
      (``... WHERE status = 'calculated'``).  Two concurrent confirmations
      yield exactly one success; the loser sees rowcount 0.
    - Returns frozen ``PayPeriodInfo`` DTOs, never ORM entities.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - NonCanonicalPeriodError: range is not a resolver-produced period.
    - PeriodLockedError: recalculating or re-paying a PAID period.
    - PayPeriodNotFoundError: confirming payment of an unknown period.
    - InvalidStatusTransitionError: confirming payment of an OPEN period.

Audit relevance:
    Calculations and payments are logged with user_id, period_key and
    actor_id.  Rejections are logged at WARNING.
"""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.pay_period import PayPeriodInfo, PayPeriodStatus, PeriodEventRef
from workshop_kernel.domain.time_range import TimeRange
from workshop_kernel.exceptions import (
    InvalidStatusTransitionError,
    NonCanonicalPeriodError,
    PayPeriodNotFoundError,
    PeriodLockedError,
)
from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.pay_period import PayPeriodEventModel, PayPeriodModel
from workshop_kernel.services.base import BaseService

logger = get_logger("services.pay_period")


class PeriodResolver(Protocol):
    """Anything that maps a day to the canonical pay period containing it."""

    def resolve(self, today: date) -> TimeRange: ...


class PayPeriodService(BaseService[PayPeriodModel]):
    """
    Service for the stored pay-period lifecycle.

    Contract:
        Accepts a user id and a ``TimeRange`` and returns frozen
        ``PayPeriodInfo`` DTOs.  Writes flush within the caller's
        transaction.

    Non-goals:
        - Does NOT aggregate events (that is PayrollAggregator).
        - Does NOT call ``session.commit()``.
    """

    def __init__(
        self,
        session: Session,
        resolver: PeriodResolver,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._resolver = resolver
        self._clock = clock or SystemClock()

    # -- queries ----------------------------------------------------------

    def _select_period(self, user_id: str, range_: TimeRange):
        return select(PayPeriodModel).where(
            PayPeriodModel.user_id == user_id,
            PayPeriodModel.start_date == range_.start,
            PayPeriodModel.end_date == range_.end,
        )

    def _get_period_for_update(
        self, user_id: str, range_: TimeRange
    ) -> PayPeriodModel | None:
        """Row-locked read; SQLite ignores FOR UPDATE."""
        return self.session.execute(
            self._select_period(user_id, range_)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_period(self, user_id: str, range_: TimeRange) -> PayPeriodInfo | None:
        period = self.session.execute(
            self._select_period(user_id, range_).execution_options(
                populate_existing=True
            )
        ).scalar_one_or_none()
        return period.to_dto() if period is not None else None

    def list_periods(
        self,
        user_id: str,
        status: PayPeriodStatus | None = None,
    ) -> list[PayPeriodInfo]:
        """All stored periods of a user, oldest first."""
        stmt = select(PayPeriodModel).where(PayPeriodModel.user_id == user_id)
        if status is not None:
            stmt = stmt.where(PayPeriodModel.status == status.value)
        stmt = stmt.order_by(PayPeriodModel.start_date)
        return [p.to_dto() for p in self.session.execute(stmt).scalars()]

    # -- commands ---------------------------------------------------------

    def assert_canonical(self, range_: TimeRange) -> None:
        expected = self._resolver.resolve(range_.start)
        if expected != range_:
            raise NonCanonicalPeriodError(range_.key, expected.key)

    def upsert_calculated(
        self,
        user_id: str,
        range_: TimeRange,
        base_salary: Decimal,
        total_additions: Decimal,
        total_deductions: Decimal,
        final_amount: Decimal,
        events: Sequence[PeriodEventRef],
        actor_id: UUID,
    ) -> PayPeriodInfo:
        """
        Insert or replace the totals and included events of ``(user_id, range_)``.

        Postconditions:
            - The row exists with status CALCULATED and the given totals.
            - Its stored events are exactly ``events``; ``event_count`` is
              their number.
            - ``calculated_at`` is the injected clock's ``now()``.

        Raises:
            NonCanonicalPeriodError: If ``range_`` is not canonical.
            PeriodLockedError: If the stored period is already PAID.
            ValueError: If ``events`` repeats an event id.
        """
        self.assert_canonical(range_)
        by_id = {ref.event_id: ref for ref in events}
        if len(by_id) != len(events):
            raise ValueError(f"Duplicate event ids for period {range_.key}")

        period = self._get_period_for_update(user_id, range_)
        if period is None:
            period = self._insert_period(user_id, range_, base_salary, actor_id)

        if period.is_paid:
            logger.warning(
                "pay_period_recalculation_rejected",
                extra={"user_id": user_id, "period_key": range_.key},
            )
            raise PeriodLockedError(user_id, range_.key, "recalculate")

        period.base_salary = base_salary
        period.total_additions = total_additions
        period.total_deductions = total_deductions
        period.final_amount = final_amount
        self._replace_events(period, by_id)
        period.event_count = len(by_id)
        period.status = PayPeriodStatus.CALCULATED.value
        period.calculated_at = self._clock.now()
        period.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "pay_period_calculated",
            extra={
                "user_id": user_id,
                "period_key": range_.key,
                "final_amount": str(final_amount),
                "event_count": len(by_id),
            },
        )
        return period.to_dto()

    def _replace_events(
        self, period: PayPeriodModel, refs: dict[str, PeriodEventRef]
    ) -> None:
        """Make the stored events equal ``refs``, updating rows kept by id."""
        kept: list[PayPeriodEventModel] = []
        for row in period.events:
            ref = refs.get(row.event_id)
            if ref is None:
                continue
            row.event_date, row.kind, row.amount = ref.day, ref.kind, ref.amount
            kept.append(row)

        stored_ids = {row.event_id for row in kept}
        kept.extend(
            PayPeriodEventModel(
                event_id=ref.event_id,
                event_date=ref.day,
                kind=ref.kind,
                amount=ref.amount,
            )
            for ref in refs.values()
            if ref.event_id not in stored_ids
        )
        period.events = kept

    def _insert_period(
        self,
        user_id: str,
        range_: TimeRange,
        base_salary: Decimal,
        actor_id: UUID,
    ) -> PayPeriodModel:
        period = PayPeriodModel(
            user_id=user_id,
            start_date=range_.start,
            end_date=range_.end,
            base_salary=base_salary,
            status=PayPeriodStatus.OPEN.value,
            created_by_id=actor_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(period)
                self.session.flush()
        except IntegrityError:
            # Lost an insert race on uq_pay_period_user_range; use the winner's row.
            existing = self._get_period_for_update(user_id, range_)
            if existing is None:
                raise
            return existing
        return period

    def mark_paid(
        self,
        user_id: str,
        range_: TimeRange,
        actor_id: UUID,
    ) -> PayPeriodInfo:
        """
        Atomically move a CALCULATED period to PAID.

        Postconditions:
            - status is PAID; ``paid_at`` / ``paid_by_id`` are stamped.

        Raises:
            PayPeriodNotFoundError: No stored period for (user_id, range_).
            PeriodLockedError: Period already PAID.
            InvalidStatusTransitionError: Period still OPEN.
        """
        result = self.session.execute(
            update(PayPeriodModel)
            .where(
                PayPeriodModel.user_id == user_id,
                PayPeriodModel.start_date == range_.start,
                PayPeriodModel.end_date == range_.end,
                PayPeriodModel.status == PayPeriodStatus.CALCULATED.value,
            )
            .values(
                status=PayPeriodStatus.PAID.value,
                paid_at=self._clock.now(),
                paid_by_id=actor_id,
                updated_by_id=actor_id,
            )
            .execution_options(synchronize_session=False)
        )

        period = self.session.execute(
            self._select_period(user_id, range_).execution_options(
                populate_existing=True
            )
        ).scalar_one_or_none()

        if result.rowcount == 0:
            if period is None:
                raise PayPeriodNotFoundError(user_id, range_.key)
            logger.warning(
                "pay_period_payment_rejected",
                extra={
                    "user_id": user_id,
                    "period_key": range_.key,
                    "status": period.status,
                },
            )
            if period.is_paid:
                raise PeriodLockedError(user_id, range_.key, "mark as paid")
            raise InvalidStatusTransitionError(
                range_.key, period.status, PayPeriodStatus.PAID.value
            )

        logger.info(
            "pay_period_paid",
            extra={
                "user_id": user_id,
                "period_key": range_.key,
                "actor_id": str(actor_id),
            },
        )
        return period.to_dto()
