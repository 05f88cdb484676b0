"""
Scheduling Types

Shared value types for the placement engine and the auto-reschedule
strategies. Plain dataclasses so both engines stay independent of the ORM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class PlannedWorkout:
    """Program workout as read from the catalog."""

    id: int
    week_number: int
    day_number: int
    name: str

    @property
    def program_order(self) -> tuple[int, int, int]:
        return (self.week_number, self.day_number, self.id)


@dataclass(frozen=True)
class PlacementRules:
    """The subset of a schedule preference the placement engine consults."""

    preferred_days: frozenset[int]
    min_rest_days: int = 1
    max_consecutive_workout_days: int = 3


@dataclass(frozen=True)
class Placement:
    workout: PlannedWorkout
    scheduled_date: date
    constrained: bool = True  # False when placed past the horizon with soft rules dropped


@dataclass
class MissedWorkout:
    """A ledger row in ``missed`` status waiting for a new date."""

    scheduled_workout_id: int
    workout_name: str
    week_number: int
    day_number: int
    missed_date: date


@dataclass
class RescheduleContext:
    """Everything a strategy handler needs for one schedule."""

    preferred_days: frozenset[int]
    today: date
    start_from: date
    occupied_dates: set[date] = field(default_factory=set)
    latest_scheduled_date: date | None = None
    window_weeks: int = 2
    end_of_schedule_horizon_days: int = 30
    spread_evenly_window_days: int = 21


class PlacementOutcome(str, Enum):
    PLACED = "placed"
    EXHAUSTED = "placement_exhausted"
    DATE_CONFLICT = "date_conflict"


@dataclass
class PlacementResult:
    missed: MissedWorkout
    outcome: PlacementOutcome
    new_date: date | None = None

    @property
    def placed(self) -> bool:
        return self.outcome is PlacementOutcome.PLACED
