"""
Module: workshop_engines.lanes
Responsibility:
    Greedy lane assignment for items that overlap one week window of the
    calendar grid.  Each item gets a lane index so that no two items on the
    same lane share a day.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import workshop_kernel.domain and the tracer.

Invariants enforced:
    - No collision: two items on the same lane never overlap.
    - Lane stability: an item already present in the incoming
      ``LaneAllocatorState`` keeps its lane in later windows.
    - Determinism: candidates are ordered by full-range start with a stable
      sort, so ties keep their input order.
    - The incoming state is never mutated; a new state is returned.

Failure modes:
    - ValueError on duplicate item ids within one call, or when a clipped
      range is not inside its full range.

Usage:
    allocator = LaneAllocator()
    first = allocator.allocate(week_1_candidates)
    second = allocator.allocate(week_2_candidates, first.state)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

from workshop_kernel.domain.time_range import TimeRange
from workshop_kernel.logging_config import get_logger
from workshop_engines.tracer import traced_engine

logger = get_logger("engines.lanes")


@dataclass(frozen=True)
class LaneCandidate:
    """An item competing for a lane inside one window."""

    item_id: str
    full_range: TimeRange
    clipped_range: TimeRange

    def __post_init__(self) -> None:
        if not (
            self.full_range.start <= self.clipped_range.start
            and self.clipped_range.end <= self.full_range.end
        ):
            raise ValueError(
                f"Clipped range {self.clipped_range} of {self.item_id!r} "
                f"is outside its full range {self.full_range}"
            )


@dataclass(frozen=True)
class LaneAllocatorState:
    """
    Lane occupancy carried from one window to the next.

    ``occupied_until[i]`` is the last day lane ``i`` is busy (the full end
    of the item most recently placed on it).  ``assignments`` maps item id
    to the lane it was given.
    """

    occupied_until: tuple[date, ...] = ()
    assignments: Mapping[str, int] = field(default_factory=dict, hash=False)

    @property
    def lane_count(self) -> int:
        return len(self.occupied_until)

    def lane_of(self, item_id: str) -> int | None:
        return self.assignments.get(item_id)


@dataclass(frozen=True)
class LaneAssignment:
    item_id: str
    lane: int


@dataclass(frozen=True)
class LaneAllocation:
    """Lanes given out in one window plus the state for the next window."""

    assignments: tuple[LaneAssignment, ...]
    state: LaneAllocatorState

    @property
    def lane_count(self) -> int:
        """Lanes used inside this window (highest lane + 1)."""
        if not self.assignments:
            return 0
        return max(a.lane for a in self.assignments) + 1

    def lane_of(self, item_id: str) -> int | None:
        for assignment in self.assignments:
            if assignment.item_id == item_id:
                return assignment.lane
        return None


def sort_candidates(candidates: Sequence[LaneCandidate]) -> list[LaneCandidate]:
    """Ascending full-range start; ties keep input order."""
    return sorted(candidates, key=lambda c: c.full_range.start)


class LaneAllocator:
    """
    First-fit interval lane allocator.

    Not a minimum-lane colouring: the greedy order is what keeps layouts
    stable between renders.
    """

    @traced_engine("lane_allocator", "1.0", fingerprint_fields=("candidates", "state"))
    def allocate(
        self,
        candidates: Sequence[LaneCandidate],
        state: LaneAllocatorState | None = None,
    ) -> LaneAllocation:
        state = state or LaneAllocatorState()

        seen: set[str] = set()
        for candidate in candidates:
            if candidate.item_id in seen:
                raise ValueError(f"Duplicate item id in lane allocation: {candidate.item_id!r}")
            seen.add(candidate.item_id)

        if not candidates:
            return LaneAllocation(assignments=(), state=state)

        lanes = list(state.occupied_until)
        assigned = dict(state.assignments)
        result: list[LaneAssignment] = []

        for candidate in sort_candidates(candidates):
            lane = assigned.get(candidate.item_id)
            if lane is None:
                lane = self._first_free_lane(lanes, candidate.clipped_range.start)
                assigned[candidate.item_id] = lane

            end = candidate.full_range.end
            if lane == len(lanes):
                lanes.append(end)
            elif lane > len(lanes):
                # Foreign state with gaps; pad so the index exists.
                lanes.extend([date.min] * (lane - len(lanes)))
                lanes.append(end)
            else:
                lanes[lane] = max(lanes[lane], end)

            result.append(LaneAssignment(candidate.item_id, lane))

        logger.debug(
            "lanes_allocated",
            extra={"item_count": len(result), "lane_count": len(lanes)},
        )
        return LaneAllocation(
            assignments=tuple(result),
            state=LaneAllocatorState(occupied_until=tuple(lanes), assignments=assigned),
        )

    @staticmethod
    def _first_free_lane(lanes: list[date], start: date) -> int:
        for index, occupied_until in enumerate(lanes):
            if occupied_until < start:
                return index
        return len(lanes)
