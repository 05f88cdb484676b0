"""
Placement engine.

Walks forward through a user's preferred weekdays and assigns every program
workout, in program order, to its own calendar date:

- the first workout lands on the earliest preferred weekday on/after the start
- each later workout keeps at least ``min_rest_days`` free days after the
  previous one
- a run of back-to-back days never grows past ``max_consecutive_workout_days``
  (0 disables the cap); the engine inserts a rest day instead

Rest and run limits are soft. Placements that would land past the horizon
(``horizon_factor`` weeks per workout) fall back to the next preferred weekday
with the limits dropped, so every workout always receives a date.
"""
from collections.abc import Iterable
from datetime import date, timedelta

from cadence.services.calendar_dates import ONE_DAY, first_preferred_on_or_after
from cadence.services.scheduling_types import Placement, PlacementRules, PlannedWorkout

DEFAULT_HORIZON_FACTOR = 3


def order_workouts(workouts: Iterable[PlannedWorkout]) -> list[PlannedWorkout]:
    """Program order: week, then day within week."""
    return sorted(workouts, key=lambda w: w.program_order)


def _next_constrained_day(previous: date, run_length: int, rules: PlacementRules) -> date:
    earliest = previous + timedelta(days=rules.min_rest_days + 1)
    day = first_preferred_on_or_after(earliest, rules.preferred_days)

    cap = rules.max_consecutive_workout_days
    if cap > 0 and run_length >= cap and day == previous + ONE_DAY:
        day = first_preferred_on_or_after(day + ONE_DAY, rules.preferred_days)
    return day


def place_workouts(
    workouts: Iterable[PlannedWorkout],
    rules: PlacementRules,
    start_date: date,
    horizon_factor: int = DEFAULT_HORIZON_FACTOR,
) -> list[Placement]:
    """Assign one distinct, strictly increasing date to each workout."""
    if not rules.preferred_days:
        raise ValueError("preferred_days must not be empty")

    ordered = order_workouts(workouts)
    if not ordered:
        return []

    horizon_end = start_date + timedelta(weeks=max(1, horizon_factor) * len(ordered))

    placements: list[Placement] = []
    previous: date | None = None
    run_length = 0

    for workout in ordered:
        constrained = True
        if previous is None:
            day = first_preferred_on_or_after(start_date, rules.preferred_days)
        else:
            day = _next_constrained_day(previous, run_length, rules)
            if day > horizon_end:
                day = first_preferred_on_or_after(previous + ONE_DAY, rules.preferred_days)
                constrained = False

        if previous is not None and day == previous + ONE_DAY:
            run_length += 1
        else:
            run_length = 1

        placements.append(Placement(workout=workout, scheduled_date=day, constrained=constrained))
        previous = day

    return placements
