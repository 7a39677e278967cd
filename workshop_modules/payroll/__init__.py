"""
Payroll module -- bi-monthly pay-period calculation and payment.

Exports the service facade, its DTOs and the lifecycle checks.
"""

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
from workshop_modules.payroll.service import PayrollService

__all__ = [
    "PayrollItemResult",
    "PayrollItemStatus",
    "PayrollRunResult",
    "PayrollService",
    "PeriodCalculation",
    "WorkerPayrollInput",
    "ensure_can_mark_paid",
    "ensure_can_recalculate",
]
