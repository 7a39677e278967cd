"""
Pure domain layer.

Contains immutable value objects and the injectable clock, with NO
dependencies on the ORM, the database or I/O.
"""

from workshop_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from workshop_kernel.domain.pay_period import PayPeriodInfo, PayPeriodStatus, PeriodEventRef
from workshop_kernel.domain.time_range import (
    DateLike,
    TimeRange,
    clip,
    normalize_date,
    overlaps,
)

__all__ = [
    "Clock",
    "DateLike",
    "DeterministicClock",
    "PayPeriodInfo",
    "PayPeriodStatus",
    "PeriodEventRef",
    "SystemClock",
    "TimeRange",
    "clip",
    "normalize_date",
    "overlaps",
]
