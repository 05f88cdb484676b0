"""
WorkoutLedgerService - Status transitions for scheduled workouts.

Transition table (anything else raises InvalidTransitionError and leaves the
row untouched):

    reschedule   scheduled, missed            -> scheduled
    skip         scheduled, missed            -> skipped
    complete     scheduled, missed, skipped   -> completed
    unschedule   completed, skipped           -> scheduled
    update       any                          -> unchanged (notes / time only)
    mark_missed  scheduled                    -> missed (sweep only)
"""
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config.settings import Settings, get_settings
from cadence.core.exceptions import (
    DateConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from cadence.core.locks import ScheduleLockRegistry, schedule_locks
from cadence.core.logging import get_logger
from cadence.models.enums import ScheduledWorkoutStatus, WorkoutAction
from cadence.models.schedule import ScheduledWorkout
from cadence.repositories.scheduled_workout_repository import ScheduledWorkoutRepository
from cadence.services.base import BaseService
from cadence.services.schedule_preferences import validate_time_of_day


logger = get_logger(__name__)

Status = ScheduledWorkoutStatus

ALLOWED_TRANSITIONS: dict[WorkoutAction, frozenset[ScheduledWorkoutStatus]] = {
    WorkoutAction.RESCHEDULE: frozenset({Status.SCHEDULED, Status.MISSED}),
    WorkoutAction.SKIP: frozenset({Status.SCHEDULED, Status.MISSED}),
    WorkoutAction.COMPLETE: frozenset({Status.SCHEDULED, Status.MISSED, Status.SKIPPED}),
    WorkoutAction.UNSCHEDULE: frozenset({Status.COMPLETED, Status.SKIPPED}),
    WorkoutAction.UPDATE: frozenset(Status),
}


class WorkoutLedgerService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        locks: ScheduleLockRegistry | None = None,
    ):
        super().__init__(db)
        self._settings = settings or get_settings()
        self._locks = locks or schedule_locks
        self._workout_repo = ScheduledWorkoutRepository(db)
        self._handlers: dict[WorkoutAction, Callable[[ScheduledWorkout, dict, datetime], Awaitable[None]]] = {
            WorkoutAction.RESCHEDULE: self._reschedule,
            WorkoutAction.SKIP: self._skip,
            WorkoutAction.COMPLETE: self._complete,
            WorkoutAction.UNSCHEDULE: self._unschedule,
            WorkoutAction.UPDATE: self._update,
        }

    async def _load(self, workout_id: int) -> ScheduledWorkout:
        workout = await self._workout_repo.get(workout_id)
        if workout is None:
            raise NotFoundError(
                "ScheduledWorkout",
                f"ScheduledWorkout {workout_id} not found",
                {"id": workout_id},
            )
        return workout

    async def get_scheduled_workout(self, workout_id: int, owner_id: int) -> ScheduledWorkout:
        workout = await self._load(workout_id)
        self._ensure_owner(workout, owner_id, "ScheduledWorkout")
        return workout

    async def update_scheduled_workout(
        self,
        workout_id: int,
        owner_id: int,
        action: WorkoutAction | str,
        params: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> ScheduledWorkout:
        """Apply one ledger action to a workout the caller owns."""
        try:
            action = WorkoutAction(action)
        except ValueError:
            raise ValidationError("action", f"unknown action '{action}'")

        workout = await self.get_scheduled_workout(workout_id, owner_id)
        if workout.status not in ALLOWED_TRANSITIONS[action]:
            raise InvalidTransitionError(action.value, workout.status.value, {"id": workout.id})

        await self._handlers[action](workout, params or {}, now or datetime.utcnow())
        logger.info(
            "scheduled_workout.updated",
            workout_id=workout.id,
            action=action.value,
            status=workout.status.value,
        )
        return workout

    async def _reschedule(self, workout: ScheduledWorkout, params: dict, now: datetime) -> None:
        new_date: date | None = params.get("new_date")
        if new_date is None:
            raise ValidationError("new_date", "is required to reschedule")
        if new_date == workout.scheduled_date:
            raise ValidationError("new_date", "must differ from the current scheduled date")
        new_time = validate_time_of_day("new_time", params.get("new_time"))

        async with self._locks.hold(workout.schedule_id):
            await self._session.refresh(workout)
            if workout.status not in ALLOWED_TRANSITIONS[WorkoutAction.RESCHEDULE]:
                raise InvalidTransitionError("reschedule", workout.status.value, {"id": workout.id})
            if new_date == workout.scheduled_date:
                raise ValidationError("new_date", "must differ from the current scheduled date")
            if await self._workout_repo.date_taken(workout.schedule_id, new_date, exclude_id=workout.id):
                raise DateConflictError(details={"date": new_date.isoformat(), "schedule_id": workout.schedule_id})

            old_date = workout.scheduled_date
            try:
                async with self._session.begin_nested():
                    if workout.original_date is None:
                        workout.original_date = old_date
                    workout.rescheduled_from = old_date
                    workout.scheduled_date = new_date
                    workout.status = Status.SCHEDULED
                    workout.rescheduled_count = (workout.rescheduled_count or 0) + 1
                    workout.rescheduled_reason = params.get("reschedule_reason")
                    if new_time is not None:
                        workout.scheduled_time = new_time
                    await self._session.flush()
            except IntegrityError as exc:
                await self._session.refresh(workout)
                raise DateConflictError(
                    details={"date": new_date.isoformat(), "schedule_id": workout.schedule_id}
                ) from exc

    async def _skip(self, workout: ScheduledWorkout, params: dict, now: datetime) -> None:
        workout.status = Status.SKIPPED
        workout.skipped_reason = params.get("skip_reason")
        workout.skipped_at = now
        await self._session.flush()

    async def _complete(self, workout: ScheduledWorkout, params: dict, now: datetime) -> None:
        if workout.status == Status.SKIPPED and self._settings.clear_skip_fields_on_complete:
            workout.skipped_at = None
            workout.skipped_reason = None
        workout.status = Status.COMPLETED
        workout.completed_at = now
        workout.completed_workout_session_ref = params.get("workout_session_id")
        await self._session.flush()

    async def _unschedule(self, workout: ScheduledWorkout, params: dict, now: datetime) -> None:
        workout.status = Status.SCHEDULED
        workout.completed_at = None
        workout.completed_workout_session_ref = None
        workout.skipped_at = None
        workout.skipped_reason = None
        await self._session.flush()

    async def _update(self, workout: ScheduledWorkout, params: dict, now: datetime) -> None:
        changes = {}
        if params.get("notes") is not None:
            changes["notes"] = params["notes"]
        new_time = validate_time_of_day("new_time", params.get("new_time"))
        if new_time is not None:
            changes["scheduled_time"] = new_time
        if changes:
            await self._workout_repo.update(workout.id, changes)

    async def delete_scheduled_workout(self, workout_id: int, owner_id: int) -> None:
        workout = await self.get_scheduled_workout(workout_id, owner_id)
        await self._workout_repo.delete(workout.id)
        logger.info("scheduled_workout.deleted", workout_id=workout_id, schedule_id=workout.schedule_id)

    async def mark_missed(self, workout_id: int) -> ScheduledWorkout:
        """Sweep entry point: flag one past-due workout. No owner check."""
        workout = await self._load(workout_id)
        if workout.status != Status.SCHEDULED:
            raise InvalidTransitionError("mark_missed", workout.status.value, {"id": workout.id})
        workout.status = Status.MISSED
        await self._session.flush()
        return workout

    async def sweep_missed(self, reference_date: date) -> list[tuple[int, int]]:
        """Flag every ``scheduled`` row dated before ``reference_date`` as missed.

        Returns ``(workout_id, user_id)`` pairs for the rows that changed.
        """
        overdue = await self._workout_repo.list_scheduled_before(reference_date)
        for workout in overdue:
            workout.status = Status.MISSED
        await self._session.flush()

        affected = [(workout.id, workout.user_id) for workout in overdue]
        logger.info(
            "missed_sweep.completed",
            reference_date=reference_date.isoformat(),
            missed=len(affected),
            users=len({user_id for _, user_id in affected}),
        )
        return affected
