"""Tests for the auto-reschedule strategy handlers."""
from datetime import date

import pytest

from cadence.models.enums import RescheduleStrategy
from cadence.services.reschedule_strategies import (
    RESCHEDULE_REASONS,
    STRATEGY_HANDLERS,
    reschedule_end_of_schedule,
    reschedule_next_available,
    reschedule_spread_evenly,
    run_strategy,
)
from cadence.services.scheduling_types import MissedWorkout, PlacementOutcome, RescheduleContext

MON_WED_FRI = frozenset({1, 3, 5})


def missed(count: int, missed_date: date = date(2025, 1, 1)) -> list[MissedWorkout]:
    return [
        MissedWorkout(
            scheduled_workout_id=i + 1,
            workout_name=f"Workout {i + 1}",
            week_number=1,
            day_number=i + 1,
            missed_date=missed_date,
        )
        for i in range(count)
    ]


def context(**overrides) -> RescheduleContext:
    values = {
        "preferred_days": MON_WED_FRI,
        "today": date(2025, 1, 5),
        "start_from": date(2025, 1, 5),
    }
    values.update(overrides)
    return RescheduleContext(**values)


class TestStrategyTable:
    def test_every_strategy_has_a_handler_and_reason(self):
        assert set(STRATEGY_HANDLERS) == set(RescheduleStrategy)
        assert set(RESCHEDULE_REASONS) == set(RescheduleStrategy)

    def test_run_strategy_accepts_string_values(self):
        results = run_strategy("next_available", missed(1), context())
        assert results[0].placed


class TestNextAvailable:
    def test_skips_occupied_days(self):
        """Jan 6 and 8 are taken, so the missed workout moves to Friday Jan 10."""
        ctx = context(occupied_dates={date(2025, 1, 6), date(2025, 1, 8)}, window_weeks=2)
        results = reschedule_next_available(missed(1), ctx)

        assert len(results) == 1
        assert results[0].outcome is PlacementOutcome.PLACED
        assert results[0].new_date == date(2025, 1, 10)

    def test_batch_never_reuses_a_date(self):
        ctx = context(occupied_dates={date(2025, 1, 6), date(2025, 1, 8)})
        results = reschedule_next_available(missed(3), ctx)

        assert [r.new_date for r in results] == [date(2025, 1, 10), date(2025, 1, 13), date(2025, 1, 15)]
        assert {date(2025, 1, 10), date(2025, 1, 13), date(2025, 1, 15)} <= ctx.occupied_dates

    def test_start_from_in_the_past_is_clamped_to_today(self):
        ctx = context(today=date(2025, 1, 7), start_from=date(2024, 12, 1))
        results = reschedule_next_available(missed(1), ctx)
        assert results[0].new_date == date(2025, 1, 8)

    def test_window_exhausted(self):
        ctx = context(preferred_days=frozenset({1}), occupied_dates={date(2025, 1, 6)}, window_weeks=1)
        results = reschedule_next_available(missed(1), ctx)

        assert results[0].outcome is PlacementOutcome.EXHAUSTED
        assert results[0].new_date is None
        assert not results[0].placed


class TestEndOfSchedule:
    def test_appends_after_latest_scheduled_date(self):
        ctx = context(latest_scheduled_date=date(2025, 1, 17))
        results = reschedule_end_of_schedule(missed(2), ctx)
        assert [r.new_date for r in results] == [date(2025, 1, 20), date(2025, 1, 22)]

    def test_without_scheduled_rows_starts_from_today(self):
        results = reschedule_end_of_schedule(missed(1), context())
        assert results[0].new_date == date(2025, 1, 6)

    def test_start_from_after_latest_scheduled_date_wins(self):
        ctx = context(latest_scheduled_date=date(2025, 1, 17), start_from=date(2025, 2, 1))
        results = reschedule_end_of_schedule(missed(2), ctx)
        assert [r.new_date for r in results] == [date(2025, 2, 3), date(2025, 2, 5)]

    def test_latest_scheduled_date_after_start_from_wins(self):
        ctx = context(latest_scheduled_date=date(2025, 1, 17), start_from=date(2025, 1, 8))
        results = reschedule_end_of_schedule(missed(1), ctx)
        assert results[0].new_date == date(2025, 1, 20)

    def test_horizon_counts_from_the_cursor(self):
        """Every Monday within 30 days of the last scheduled day is taken."""
        mondays = {date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 20), date(2025, 1, 27), date(2025, 2, 3)}
        ctx = context(
            preferred_days=frozenset({1}),
            occupied_dates=set(mondays),
            latest_scheduled_date=date(2025, 1, 5),
            end_of_schedule_horizon_days=30,
        )
        results = reschedule_end_of_schedule(missed(1), ctx)
        assert results[0].outcome is PlacementOutcome.EXHAUSTED

        ctx.end_of_schedule_horizon_days = 36
        results = reschedule_end_of_schedule(missed(1), ctx)
        assert results[0].new_date == date(2025, 2, 10)


class TestSpreadEvenly:
    def test_spreads_across_window(self):
        ctx = context(today=date(2025, 1, 6), start_from=date(2025, 1, 6))
        results = reschedule_spread_evenly(missed(2), ctx)
        # Ten Mon/Wed/Fri slots in Jan 6..27; step 5.
        assert [r.new_date for r in results] == [date(2025, 1, 6), date(2025, 1, 17)]

    def test_occupied_slots_are_excluded(self):
        ctx = context(today=date(2025, 1, 6), start_from=date(2025, 1, 6), occupied_dates={date(2025, 1, 6)})
        results = reschedule_spread_evenly(missed(2), ctx)
        assert [r.new_date for r in results] == [date(2025, 1, 8), date(2025, 1, 17)]

    def test_more_workouts_than_slots(self):
        """The clamped last slot is handed out once; the rest stay unplaced."""
        ctx = context(preferred_days=frozenset({1}), today=date(2025, 1, 6), start_from=date(2025, 1, 6))
        results = reschedule_spread_evenly(missed(6), ctx)

        assert [r.new_date for r in results[:4]] == [
            date(2025, 1, 6),
            date(2025, 1, 13),
            date(2025, 1, 20),
            date(2025, 1, 27),
        ]
        assert [r.outcome for r in results[4:]] == [PlacementOutcome.EXHAUSTED, PlacementOutcome.EXHAUSTED]

    def test_no_slots(self):
        ctx = context(preferred_days=frozenset({1}), spread_evenly_window_days=0, today=date(2025, 1, 7), start_from=date(2025, 1, 7))
        results = reschedule_spread_evenly(missed(2), ctx)
        assert all(r.outcome is PlacementOutcome.EXHAUSTED for r in results)

    def test_empty_batch(self):
        assert reschedule_spread_evenly([], context()) == []


@pytest.mark.parametrize("strategy", list(RescheduleStrategy))
def test_no_strategy_returns_an_occupied_date(strategy):
    occupied = {date(2025, 1, 6), date(2025, 1, 8), date(2025, 1, 10)}
    ctx = context(occupied_dates=set(occupied), latest_scheduled_date=date(2025, 1, 10))
    results = run_strategy(strategy, missed(4), ctx)

    new_dates = [r.new_date for r in results if r.placed]
    assert not set(new_dates) & occupied
    assert len(set(new_dates)) == len(new_dates)
