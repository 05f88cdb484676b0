"""
Auto-reschedule strategies.

Each strategy is one handler with the same signature,
``handler(missed, context) -> list[PlacementResult]``, looked up through
``STRATEGY_HANDLERS``. Handlers are pure: they only read the context and mark
the dates they hand out in ``context.occupied_dates`` so later workouts in the
batch cannot claim the same slot. Workouts are expected in program order;
earlier workouts claim earlier dates.
"""
from collections.abc import Callable
from datetime import date, timedelta

from cadence.models.enums import RescheduleStrategy
from cadence.services.calendar_dates import next_available_date, preferred_dates_between
from cadence.services.scheduling_types import (
    MissedWorkout,
    PlacementOutcome,
    PlacementResult,
    RescheduleContext,
)

StrategyHandler = Callable[[list[MissedWorkout], RescheduleContext], list[PlacementResult]]

RESCHEDULE_REASONS: dict[RescheduleStrategy, str] = {
    RescheduleStrategy.NEXT_AVAILABLE: "Auto-rescheduled from missed workout",
    RescheduleStrategy.END_OF_SCHEDULE: "Auto-rescheduled to end of schedule",
    RescheduleStrategy.SPREAD_EVENLY: "Auto-rescheduled (spread evenly)",
}


def _place_sequentially(
    missed: list[MissedWorkout],
    context: RescheduleContext,
    cursor: date,
    horizon_days: int,
) -> list[PlacementResult]:
    results = []
    for item in missed:
        new_date = next_available_date(cursor, context.preferred_days, context.occupied_dates, horizon_days)
        if new_date is None:
            results.append(PlacementResult(item, PlacementOutcome.EXHAUSTED))
            continue
        context.occupied_dates.add(new_date)
        cursor = new_date
        results.append(PlacementResult(item, PlacementOutcome.PLACED, new_date))
    return results


def reschedule_next_available(missed: list[MissedWorkout], context: RescheduleContext) -> list[PlacementResult]:
    """Nearest free preferred day, searching ``window_weeks`` ahead of the cursor."""
    cursor = max(context.start_from, context.today)
    return _place_sequentially(missed, context, cursor, context.window_weeks * 7)


def reschedule_end_of_schedule(missed: list[MissedWorkout], context: RescheduleContext) -> list[PlacementResult]:
    """Append repairs after the last workout already on the calendar, never before ``start_from``."""
    cursor = max(context.start_from, context.today)
    if context.latest_scheduled_date is not None and context.latest_scheduled_date > cursor:
        cursor = context.latest_scheduled_date
    return _place_sequentially(missed, context, cursor, context.end_of_schedule_horizon_days)


def reschedule_spread_evenly(missed: list[MissedWorkout], context: RescheduleContext) -> list[PlacementResult]:
    """Distribute repairs over the free preferred days of a fixed window."""
    if not missed:
        return []

    start = max(context.start_from, context.today)
    window_end = start + timedelta(days=context.spread_evenly_window_days)
    slots = preferred_dates_between(start, window_end, context.preferred_days, context.occupied_dates)
    if not slots:
        return [PlacementResult(item, PlacementOutcome.EXHAUSTED) for item in missed]

    step = max(1, len(slots) // len(missed))

    results = []
    for index, item in enumerate(missed):
        new_date = slots[min(index * step, len(slots) - 1)]
        # More workouts than slots: the clamped last slot is handed out once.
        if new_date in context.occupied_dates:
            results.append(PlacementResult(item, PlacementOutcome.EXHAUSTED))
            continue
        context.occupied_dates.add(new_date)
        results.append(PlacementResult(item, PlacementOutcome.PLACED, new_date))
    return results


STRATEGY_HANDLERS: dict[RescheduleStrategy, StrategyHandler] = {
    RescheduleStrategy.NEXT_AVAILABLE: reschedule_next_available,
    RescheduleStrategy.END_OF_SCHEDULE: reschedule_end_of_schedule,
    RescheduleStrategy.SPREAD_EVENLY: reschedule_spread_evenly,
}


def run_strategy(
    strategy: RescheduleStrategy,
    missed: list[MissedWorkout],
    context: RescheduleContext,
) -> list[PlacementResult]:
    handler = STRATEGY_HANDLERS[RescheduleStrategy(strategy)]
    return handler(missed, context)
