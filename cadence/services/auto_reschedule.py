"""
AutoRescheduleService - Moves missed workouts back onto the calendar.

Per schedule, in program order:
1. Collect the owner's missed workouts (optionally narrowed to one schedule
   or an explicit id list)
2. Skip schedules with auto-reschedule disabled or paused past today
3. Under the schedule lock, re-read which of those rows are still missed and
   ask the selected strategy for new dates, avoiding every date the schedule
   already holds from today on
4. Re-check each date and write it inside a savepoint; a lost race leaves the
   workout missed and reports it

Nothing here raises for an unplaceable workout; failures are part of the
returned summary.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config.settings import Settings, get_settings
from cadence.core.locks import ScheduleLockRegistry, schedule_locks
from cadence.core.logging import get_logger
from cadence.models.enums import RescheduleStrategy, ScheduledWorkoutStatus
from cadence.models.schedule import SchedulePreference, ScheduledWorkout
from cadence.repositories.schedule_preference_repository import SchedulePreferenceRepository
from cadence.repositories.scheduled_workout_repository import ScheduledWorkoutRepository
from cadence.services.base import BaseService
from cadence.services.reschedule_strategies import RESCHEDULE_REASONS, run_strategy
from cadence.services.scheduling_types import (
    MissedWorkout,
    PlacementOutcome,
    PlacementResult,
    RescheduleContext,
)


logger = get_logger(__name__)

SKIP_DISABLED = "auto_reschedule_disabled"
SKIP_PAUSED = "paused"


@dataclass
class RescheduledWorkout:
    workout_id: int
    workout_name: str
    old_date: date
    new_date: date


@dataclass
class UnplacedWorkout:
    workout_id: int
    workout_name: str
    missed_date: date
    reason: str


@dataclass
class SkippedSchedule:
    schedule_id: int
    reason: str


@dataclass
class AutoRescheduleSummary:
    strategy: RescheduleStrategy
    rescheduled: list[RescheduledWorkout] = field(default_factory=list)
    not_rescheduled: list[UnplacedWorkout] = field(default_factory=list)
    skipped_schedules: list[SkippedSchedule] = field(default_factory=list)

    @property
    def total_rescheduled(self) -> int:
        return len(self.rescheduled)

    @property
    def message(self) -> str | None:
        if not (self.rescheduled or self.not_rescheduled or self.skipped_schedules):
            return "No missed workouts to reschedule"
        return None


class AutoRescheduleService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        locks: ScheduleLockRegistry | None = None,
    ):
        super().__init__(db)
        self._settings = settings or get_settings()
        self._locks = locks or schedule_locks
        self._preference_repo = SchedulePreferenceRepository(db)
        self._workout_repo = ScheduledWorkoutRepository(db)

    async def auto_reschedule(
        self,
        owner_id: int,
        today: date,
        schedule_id: int | None = None,
        workout_ids: list[int] | None = None,
        strategy: RescheduleStrategy = RescheduleStrategy.NEXT_AVAILABLE,
        start_from: date | None = None,
    ) -> AutoRescheduleSummary:
        strategy = RescheduleStrategy(strategy)
        summary = AutoRescheduleSummary(strategy=strategy)

        missed_rows = await self._workout_repo.list_missed_for_user(owner_id, schedule_id, workout_ids)
        if not missed_rows:
            return summary

        by_schedule: dict[int, list[ScheduledWorkout]] = defaultdict(list)
        for row in missed_rows:
            by_schedule[row.schedule_id].append(row)
        preferences = await self._preference_repo.list_by_ids(list(by_schedule))

        for sid, rows in by_schedule.items():
            preference = preferences.get(sid)
            if preference is None:
                continue
            if not preference.auto_reschedule_enabled:
                summary.skipped_schedules.append(SkippedSchedule(sid, SKIP_DISABLED))
                continue
            if preference.is_paused(today):
                summary.skipped_schedules.append(SkippedSchedule(sid, SKIP_PAUSED))
                continue

            async with self._locks.hold(sid):
                # Rows may have been moved, skipped or completed while waiting for the lock.
                current = await self._workout_repo.list_missed_for_user(owner_id, sid, [row.id for row in rows])
                if current:
                    await self._repair_schedule(preference, current, summary, today, start_from)

        logger.info(
            "auto_reschedule.completed",
            user_id=owner_id,
            strategy=strategy.value,
            rescheduled=summary.total_rescheduled,
            not_rescheduled=len(summary.not_rescheduled),
            skipped_schedules=len(summary.skipped_schedules),
        )
        return summary

    async def _repair_schedule(
        self,
        preference: SchedulePreference,
        rows: list[ScheduledWorkout],
        summary: AutoRescheduleSummary,
        today: date,
        start_from: date | None,
    ) -> None:
        rows_by_id = {row.id: row for row in rows}
        missed = [
            MissedWorkout(
                scheduled_workout_id=row.id,
                workout_name=row.program_workout.name,
                week_number=row.program_workout.week_number,
                day_number=row.program_workout.day_number,
                missed_date=row.scheduled_date,
            )
            for row in rows
        ]
        context = RescheduleContext(
            preferred_days=frozenset(preference.preferred_days),
            today=today,
            start_from=start_from or today,
            occupied_dates=await self._workout_repo.occupied_dates(preference.id, today),
            latest_scheduled_date=await self._workout_repo.latest_scheduled_date(preference.id, today),
            window_weeks=preference.reschedule_window_weeks,
            end_of_schedule_horizon_days=self._settings.end_of_schedule_horizon_days,
            spread_evenly_window_days=self._settings.spread_evenly_window_days,
        )

        for result in run_strategy(summary.strategy, missed, context):
            if not result.placed:
                self._report_unplaced(summary, result, preference.id)
                continue

            row = rows_by_id[result.missed.scheduled_workout_id]
            if await self._workout_repo.date_taken(preference.id, result.new_date, exclude_id=row.id):
                result.outcome = PlacementOutcome.DATE_CONFLICT
                self._report_unplaced(summary, result, preference.id)
                continue

            try:
                async with self._session.begin_nested():
                    self._apply(row, result.new_date, RESCHEDULE_REASONS[summary.strategy])
                    await self._session.flush()
            except IntegrityError:
                await self._session.refresh(row)
                result.outcome = PlacementOutcome.DATE_CONFLICT
                self._report_unplaced(summary, result, preference.id)
                continue

            summary.rescheduled.append(
                RescheduledWorkout(
                    workout_id=row.id,
                    workout_name=result.missed.workout_name,
                    old_date=result.missed.missed_date,
                    new_date=result.new_date,
                )
            )

    @staticmethod
    def _apply(row: ScheduledWorkout, new_date: date, reason: str) -> None:
        if row.original_date is None:
            row.original_date = row.scheduled_date
        row.rescheduled_from = row.scheduled_date
        row.scheduled_date = new_date
        row.status = ScheduledWorkoutStatus.SCHEDULED
        row.rescheduled_count = (row.rescheduled_count or 0) + 1
        row.rescheduled_reason = reason

    @staticmethod
    def _report_unplaced(summary: AutoRescheduleSummary, result: PlacementResult, schedule_id: int) -> None:
        summary.not_rescheduled.append(
            UnplacedWorkout(
                workout_id=result.missed.scheduled_workout_id,
                workout_name=result.missed.workout_name,
                missed_date=result.missed.missed_date,
                reason=result.outcome.value,
            )
        )
        logger.warning(
            "auto_reschedule.exhausted" if result.outcome is PlacementOutcome.EXHAUSTED else "auto_reschedule.date_conflict",
            schedule_id=schedule_id,
            workout_id=result.missed.scheduled_workout_id,
            missed_date=result.missed.missed_date.isoformat(),
        )

    async def reschedule_for_users(
        self,
        user_ids: list[int],
        today: date,
        strategy: RescheduleStrategy = RescheduleStrategy.NEXT_AVAILABLE,
    ) -> int:
        """Run auto-reschedule for each user after a missed sweep; returns the total moved."""
        total = 0
        for user_id in sorted(set(user_ids)):
            summary = await self.auto_reschedule(user_id, today, strategy=strategy)
            total += summary.total_rescheduled
        return total
