from __future__ import annotations
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from cadence.models.enums import ScheduledWorkoutStatus
from cadence.models.program import ProgramWorkout
from cadence.models.schedule import ScheduledWorkout
from cadence.repositories.base import Repository


class ScheduledWorkoutRepository(Repository[ScheduledWorkout, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> ScheduledWorkout | None:
        result = await self._session.execute(
            select(ScheduledWorkout).where(ScheduledWorkout.id == id)
        )
        return result.unique().scalar_one_or_none()

    async def list_for_schedule(
        self,
        schedule_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[ScheduledWorkout]:
        query = select(ScheduledWorkout).where(ScheduledWorkout.schedule_id == schedule_id)

        if start_date:
            query = query.where(ScheduledWorkout.scheduled_date >= start_date)
        if end_date:
            query = query.where(ScheduledWorkout.scheduled_date <= end_date)

        query = query.order_by(ScheduledWorkout.scheduled_date)
        result = await self._session.execute(query)
        return list(result.unique().scalars().all())

    async def count_for_schedule(self, schedule_id: int) -> int:
        result = await self._session.execute(
            select(func.count(ScheduledWorkout.id)).where(ScheduledWorkout.schedule_id == schedule_id)
        )
        return result.scalar() or 0

    async def date_taken(self, schedule_id: int, scheduled_date: date, exclude_id: int | None = None) -> bool:
        query = select(ScheduledWorkout.id).where(
            ScheduledWorkout.schedule_id == schedule_id,
            ScheduledWorkout.scheduled_date == scheduled_date,
        )
        if exclude_id is not None:
            query = query.where(ScheduledWorkout.id != exclude_id)
        result = await self._session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def occupied_dates(self, schedule_id: int, from_date: date) -> set[date]:
        """Dates on or after ``from_date`` held by any row of the schedule, whatever its status."""
        result = await self._session.execute(
            select(ScheduledWorkout.scheduled_date).where(
                ScheduledWorkout.schedule_id == schedule_id,
                ScheduledWorkout.scheduled_date >= from_date,
            )
        )
        return set(result.scalars().all())

    async def latest_scheduled_date(self, schedule_id: int, from_date: date) -> date | None:
        result = await self._session.execute(
            select(func.max(ScheduledWorkout.scheduled_date)).where(
                ScheduledWorkout.schedule_id == schedule_id,
                ScheduledWorkout.status == ScheduledWorkoutStatus.SCHEDULED,
                ScheduledWorkout.scheduled_date >= from_date,
            )
        )
        return result.scalar()

    async def list_missed_for_user(
        self,
        user_id: int,
        schedule_id: int | None = None,
        workout_ids: list[int] | None = None,
    ) -> list[ScheduledWorkout]:
        """Missed rows in program order (week, then day), reloaded from the database."""
        query = (
            select(ScheduledWorkout)
            .execution_options(populate_existing=True)
            .join(ProgramWorkout, ScheduledWorkout.program_workout_id == ProgramWorkout.id)
            .where(
                ScheduledWorkout.user_id == user_id,
                ScheduledWorkout.status == ScheduledWorkoutStatus.MISSED,
            )
        )
        if schedule_id is not None:
            query = query.where(ScheduledWorkout.schedule_id == schedule_id)
        if workout_ids:
            query = query.where(ScheduledWorkout.id.in_(workout_ids))

        query = query.order_by(ProgramWorkout.week_number, ProgramWorkout.day_number, ScheduledWorkout.id)
        result = await self._session.execute(query)
        return list(result.unique().scalars().all())

    async def list_scheduled_before(self, reference_date: date) -> list[ScheduledWorkout]:
        result = await self._session.execute(
            select(ScheduledWorkout)
            .where(
                ScheduledWorkout.status == ScheduledWorkoutStatus.SCHEDULED,
                ScheduledWorkout.scheduled_date < reference_date,
            )
            .order_by(ScheduledWorkout.scheduled_date, ScheduledWorkout.id)
        )
        return list(result.unique().scalars().all())

    async def create_many(self, entities: list[ScheduledWorkout]) -> list[ScheduledWorkout]:
        self._session.add_all(entities)
        await self._session.flush()
        return entities

    async def update(self, id: int, updates: dict) -> ScheduledWorkout | None:
        workout = await self.get(id)
        if workout:
            for key, value in updates.items():
                if hasattr(workout, key):
                    setattr(workout, key, value)
            await self._session.flush()
        return workout

    async def delete(self, id: int) -> bool:
        workout = await self.get(id)
        if workout:
            await self._session.delete(workout)
            await self._session.flush()
            return True
        return False

    async def delete_for_schedule(self, schedule_id: int) -> int:
        result = await self._session.execute(
            delete(ScheduledWorkout).where(ScheduledWorkout.schedule_id == schedule_id)
        )
        return result.rowcount or 0
