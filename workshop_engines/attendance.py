"""
Module: workshop_engines.attendance
Responsibility:
    Turn raw access-log records (check-ins and check-outs) into one
    ``AttendanceSummary`` per worker-day: first check-in, last check-out and
    the hours covered by paired IN -> OUT intervals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The summaries only annotate the payroll timeline; they never change
    payroll totals.

Invariants enforced:
    - Records are grouped by local calendar day of their timestamp.
    - Unpaired records contribute no hours: a second IN while already
      inside is ignored, an OUT without a preceding IN is ignored.

Failure modes:
    - ValueError for an access type outside IN / OUT and their spellings.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from workshop_kernel.db.types import round_money
from workshop_kernel.domain.time_range import normalize_date


class AccessType(str, Enum):
    IN = "IN"
    OUT = "OUT"


_ACCESS_ALIASES: dict[str, AccessType] = {
    "IN": AccessType.IN,
    "ENTRADA": AccessType.IN,
    "OUT": AccessType.OUT,
    "SALIDA": AccessType.OUT,
}


def parse_access_type(value: str | AccessType) -> AccessType:
    if isinstance(value, AccessType):
        return value
    try:
        return _ACCESS_ALIASES[str(value).strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown access record type: {value!r}") from None


@dataclass(frozen=True)
class AccessRecord:
    user_id: str
    timestamp: datetime
    type: AccessType

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", parse_access_type(self.type))

    @property
    def day(self) -> date:
        return normalize_date(self.timestamp)


@dataclass(frozen=True)
class AttendanceSummary:
    day: date
    check_in: datetime | None
    check_out: datetime | None
    total_hours: Decimal

    @property
    def is_complete(self) -> bool:
        return (
            self.check_in is not None
            and self.check_out is not None
            and self.check_out > self.check_in
        )


def _summarize_day(day: date, records: list[AccessRecord]) -> AttendanceSummary:
    records.sort(key=lambda r: r.timestamp)

    check_in = next((r.timestamp for r in records if r.type is AccessType.IN), None)
    check_out = next(
        (r.timestamp for r in reversed(records) if r.type is AccessType.OUT), None
    )

    seconds = 0.0
    opened: datetime | None = None
    for record in records:
        if record.type is AccessType.IN:
            if opened is None:
                opened = record.timestamp
        elif opened is not None:
            seconds += (record.timestamp - opened).total_seconds()
            opened = None

    hours = Decimal(int(seconds)) / Decimal(3600)
    return AttendanceSummary(
        day=day,
        check_in=check_in,
        check_out=check_out,
        total_hours=round_money(hours),
    )


def summarize_attendance(
    records: Iterable[AccessRecord],
    user_id: str | None = None,
) -> dict[date, AttendanceSummary]:
    """
    Per-day attendance summaries, keyed and ordered by day.

    When ``user_id`` is given, records of other users are skipped.
    """
    by_day: dict[date, list[AccessRecord]] = defaultdict(list)
    for record in records:
        if user_id is not None and record.user_id != user_id:
            continue
        by_day[record.day].append(record)

    return {day: _summarize_day(day, by_day[day]) for day in sorted(by_day)}
