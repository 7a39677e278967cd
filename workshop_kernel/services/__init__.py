"""Kernel services -- the imperative shell around the pay-period table."""

from workshop_kernel.services.base import BaseService
from workshop_kernel.services.pay_period_service import (
    PayPeriodService,
    PeriodResolver,
)

__all__ = [
    "BaseService",
    "PayPeriodService",
    "PeriodResolver",
]
