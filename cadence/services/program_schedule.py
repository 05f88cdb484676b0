"""
ProgramScheduleService - Lays a program's workouts onto the user's calendar.

Wraps the pure placement engine with persistence: resolves the start date,
guards against double generation, writes one scheduled workout per program
workout and stamps the schedule.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config.settings import Settings, get_settings
from cadence.core.exceptions import ConflictError, ValidationError
from cadence.core.locks import ScheduleLockRegistry, schedule_locks
from cadence.core.logging import get_logger
from cadence.models.enums import ScheduledWorkoutStatus
from cadence.models.schedule import SchedulePreference, ScheduledWorkout
from cadence.repositories.program_repository import ProgramRepository
from cadence.repositories.schedule_preference_repository import SchedulePreferenceRepository
from cadence.repositories.scheduled_workout_repository import ScheduledWorkoutRepository
from cadence.services.base import BaseService
from cadence.services.placement import place_workouts
from cadence.services.schedule_preferences import SchedulePreferenceService
from cadence.services.scheduling_types import PlacementRules, PlannedWorkout


logger = get_logger(__name__)


@dataclass
class GeneratedSchedule:
    schedule: SchedulePreference
    scheduled_workouts: list[ScheduledWorkout] = field(default_factory=list)

    @property
    def total_workouts(self) -> int:
        return len(self.scheduled_workouts)

    @property
    def start_date(self) -> date | None:
        return self.scheduled_workouts[0].scheduled_date if self.scheduled_workouts else None

    @property
    def end_date(self) -> date | None:
        return self.scheduled_workouts[-1].scheduled_date if self.scheduled_workouts else None


def placement_rules_for(preference: SchedulePreference) -> PlacementRules:
    return PlacementRules(
        preferred_days=frozenset(preference.preferred_days),
        min_rest_days=preference.min_rest_days,
        max_consecutive_workout_days=preference.max_consecutive_workout_days,
    )


class ProgramScheduleService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        locks: ScheduleLockRegistry | None = None,
    ):
        super().__init__(db)
        self._settings = settings or get_settings()
        self._locks = locks or schedule_locks
        self._preferences = SchedulePreferenceService(db, self._settings)
        self._preference_repo = SchedulePreferenceRepository(db)
        self._program_repo = ProgramRepository(db)
        self._workout_repo = ScheduledWorkoutRepository(db)

    async def place_program_schedule(
        self,
        enrollment_id: int,
        owner_id: int,
        today: date,
        preferences: dict[str, Any] | None = None,
        start_date: date | None = None,
        regenerate: bool = False,
    ) -> GeneratedSchedule:
        """
        Generate the full calendar for an enrollment.

        Args:
            enrollment_id: Enrollment whose program is placed
            owner_id: Caller; must own the enrollment
            today: Reference date used when neither an explicit nor an
                enrollment start date exists
            preferences: Optional preference fields to upsert first
            start_date: Explicit first day to consider
            regenerate: Replace an existing calendar instead of failing

        Raises:
            ConflictError: A calendar already exists and ``regenerate`` is false
            ValidationError: Invalid preferences, or the program has no workouts
        """
        enrollment = await self._preferences.get_owned_enrollment(enrollment_id, owner_id)

        existing = await self._preference_repo.get_by_enrollment(enrollment_id)
        if existing is not None and not regenerate:
            if await self._workout_repo.count_for_schedule(existing.id) > 0:
                raise ConflictError(
                    "A schedule already exists for this enrollment",
                    code="CF_SCHEDULE_EXISTS",
                    details={"enrollment_id": enrollment_id, "schedule_id": existing.id},
                )

        program_workouts = await self._program_repo.list_program_workouts(enrollment.program_id)
        if not program_workouts:
            raise ValidationError("program", "program has no workouts to schedule")

        preference = await self._preferences.upsert(enrollment_id, owner_id, preferences)

        start = start_date or enrollment.start_date or today
        if preference.paused_until is not None and preference.paused_until > start:
            start = preference.paused_until

        async with self._locks.hold(preference.id):
            if regenerate:
                removed = await self._workout_repo.delete_for_schedule(preference.id)
                if removed:
                    logger.info("placement.regenerate", schedule_id=preference.id, removed=removed)

            planned = [
                PlannedWorkout(id=pw.id, week_number=pw.week_number, day_number=pw.day_number, name=pw.name)
                for pw in program_workouts
            ]
            placements = place_workouts(
                planned,
                placement_rules_for(preference),
                start,
                self._settings.placement_horizon_factor,
            )

            catalog = {pw.id: pw for pw in program_workouts}
            rows = [
                ScheduledWorkout(
                    schedule_id=preference.id,
                    program_workout_id=placement.workout.id,
                    program_workout=catalog[placement.workout.id],
                    user_id=enrollment.user_id,
                    scheduled_date=placement.scheduled_date,
                    original_date=placement.scheduled_date,
                    status=ScheduledWorkoutStatus.SCHEDULED,
                    rescheduled_count=0,
                )
                for placement in placements
            ]
            try:
                async with self._session.begin_nested():
                    await self._workout_repo.create_many(rows)
            except IntegrityError as exc:
                raise ConflictError(
                    "A schedule was generated concurrently for this enrollment",
                    code="CF_SCHEDULE_EXISTS",
                    details={"enrollment_id": enrollment_id, "schedule_id": preference.id},
                ) from exc

            preference.last_schedule_generated_at = datetime.utcnow()
            await self._session.flush()

        unconstrained = sum(1 for p in placements if not p.constrained)
        logger.info(
            "placement.completed",
            schedule_id=preference.id,
            enrollment_id=enrollment_id,
            workouts=len(rows),
            start_date=str(rows[0].scheduled_date),
            end_date=str(rows[-1].scheduled_date),
            past_horizon=unconstrained,
        )
        return GeneratedSchedule(schedule=preference, scheduled_workouts=rows)

    async def get_schedule(
        self,
        enrollment_id: int,
        owner_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> GeneratedSchedule | None:
        """Current calendar ordered by date, or None when nothing was generated yet."""
        preference = await self._preferences.find(enrollment_id, owner_id)
        if preference is None:
            return None
        if start_date and end_date and start_date > end_date:
            raise ValidationError("end_date", "must not be before start_date")

        workouts = await self._workout_repo.list_for_schedule(preference.id, start_date, end_date)
        return GeneratedSchedule(schedule=preference, scheduled_workouts=workouts)
