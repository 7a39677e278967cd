"""
Module: workshop_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: lane
    allocation, calendar layout, pay-period resolution, payroll aggregation
    and attendance summaries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import workshop_kernel.domain, workshop_kernel.db.types,
    workshop_kernel.exceptions and logging.  MUST NOT import
    workshop_config or workshop_modules.

Invariants enforced:
    - Engines never call ``date.today()`` or ``datetime.now()``; the current
      day is always an argument.
    - Decimal-only money arithmetic.
    - Identical input produces identical output.
"""

from workshop_engines.attendance import (
    AccessRecord,
    AccessType,
    AttendanceSummary,
    parse_access_type,
    summarize_attendance,
)
from workshop_engines.calendar_layout import (
    CalendarDay,
    CalendarLayoutEngine,
    LayoutSegment,
    MissionProgress,
    MonthLayout,
    ProgressState,
    ScheduledItem,
    WeekWindow,
    grid_days,
    mission_progress,
    month_grid,
    shift_month,
)
from workshop_engines.lanes import (
    LaneAllocation,
    LaneAllocator,
    LaneAllocatorState,
    LaneAssignment,
    LaneCandidate,
)
from workshop_engines.pay_period import (
    PayPeriodResolver,
    is_canonical,
    resolve_pay_period,
)
from workshop_engines.payroll_aggregation import (
    EVENT_EFFECTS,
    HOUR_BASED_KINDS,
    LEGACY_EVENT_CODES,
    EventEffect,
    PayPeriodAggregate,
    PayrollAggregator,
    PayrollEvent,
    PayrollEventKind,
    PayrollTotals,
    TimelineDay,
    amount_for_hours,
    classify,
    hourly_rate,
    parse_event_kind,
)
from workshop_engines.tracer import traced_engine

__all__ = [
    "AccessRecord",
    "AccessType",
    "AttendanceSummary",
    "CalendarDay",
    "CalendarLayoutEngine",
    "EVENT_EFFECTS",
    "EventEffect",
    "HOUR_BASED_KINDS",
    "LEGACY_EVENT_CODES",
    "LaneAllocation",
    "LaneAllocator",
    "LaneAllocatorState",
    "LaneAssignment",
    "LaneCandidate",
    "LayoutSegment",
    "MissionProgress",
    "MonthLayout",
    "PayPeriodAggregate",
    "PayPeriodResolver",
    "PayrollAggregator",
    "PayrollEvent",
    "PayrollEventKind",
    "PayrollTotals",
    "ProgressState",
    "ScheduledItem",
    "TimelineDay",
    "WeekWindow",
    "amount_for_hours",
    "classify",
    "grid_days",
    "hourly_rate",
    "is_canonical",
    "mission_progress",
    "month_grid",
    "parse_access_type",
    "parse_event_kind",
    "resolve_pay_period",
    "shift_month",
    "summarize_attendance",
    "traced_engine",
]
