"""
Pay-period lifecycle rules (``workshop_modules.payroll.lifecycle``).

    OPEN --calculate--> CALCULATED --calculate--> CALCULATED
                             |
                             +--confirm payment--> PAID (terminal)

These checks run before any work is done so a request against a PAID
period is rejected without aggregating.  The stored transition itself is
still guarded atomically by ``PayPeriodService``.
"""

from __future__ import annotations

from workshop_kernel.domain.pay_period import PayPeriodStatus
from workshop_kernel.exceptions import InvalidStatusTransitionError, PeriodLockedError


def ensure_can_recalculate(
    user_id: str,
    period_key: str,
    status: PayPeriodStatus | None,
) -> None:
    """``status`` is None when the period has never been stored."""
    if status is None:
        return
    if status is PayPeriodStatus.PAID:
        raise PeriodLockedError(user_id, period_key, "recalculate")
    if not status.can_transition_to(PayPeriodStatus.CALCULATED):
        raise InvalidStatusTransitionError(
            period_key, status.value, PayPeriodStatus.CALCULATED.value
        )


def ensure_can_mark_paid(
    user_id: str,
    period_key: str,
    status: PayPeriodStatus,
) -> None:
    if status is PayPeriodStatus.PAID:
        raise PeriodLockedError(user_id, period_key, "mark as paid")
    if not status.can_transition_to(PayPeriodStatus.PAID):
        raise InvalidStatusTransitionError(
            period_key, status.value, PayPeriodStatus.PAID.value
        )
