"""
WorkshopConfig schema.

Frozen dataclasses that the loader builds from YAML.  Validation runs in
``__post_init__`` so an invalid value can never reach an engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollSettings:
    """Pay-period cadence and hourly-rate derivation."""

    working_days_per_period: int = 10
    paid_hours_per_day: int = 9
    overtime_multiplier: Decimal = Decimal("1.5")
    period_anchor_days: tuple[int, int] = (5, 20)
    decimal_places: int = 2

    def __post_init__(self) -> None:
        if self.working_days_per_period <= 0:
            raise ValueError("payroll.working_days_per_period must be positive")
        if self.paid_hours_per_day <= 0:
            raise ValueError("payroll.paid_hours_per_day must be positive")
        if self.overtime_multiplier <= 0:
            raise ValueError("payroll.overtime_multiplier must be positive")
        if len(self.period_anchor_days) != 2:
            raise ValueError("payroll.period_anchor_days needs exactly two days")
        first, second = self.period_anchor_days
        if not 1 <= first < second <= 27:
            raise ValueError(
                "payroll.period_anchor_days must satisfy 1 <= first < second <= 27, "
                f"got {self.period_anchor_days}"
            )
        if self.decimal_places < 0:
            raise ValueError("payroll.decimal_places cannot be negative")


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalendarSettings:
    """Month grid shape and the days flagged as holidays."""

    weeks_in_grid: int = 6
    holidays: frozenset[date] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Five Monday-aligned weeks cannot always cover a 31-day month.
        if not 6 <= self.weeks_in_grid <= 8:
            raise ValueError(
                f"calendar.weeks_in_grid must be between 6 and 8, got {self.weeks_in_grid}"
            )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkshopConfig:
    """The runtime configuration artifact returned by ``get_active_config()``."""

    config_id: str
    version: int
    payroll: PayrollSettings = field(default_factory=PayrollSettings)
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    checksum: str = ""
