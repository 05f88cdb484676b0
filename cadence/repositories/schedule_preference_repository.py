from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from cadence.models.schedule import SchedulePreference
from cadence.repositories.base import Repository


class SchedulePreferenceRepository(Repository[SchedulePreference, int]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: int) -> SchedulePreference | None:
        return await self._session.get(SchedulePreference, id)

    async def get_by_enrollment(self, enrollment_id: int) -> SchedulePreference | None:
        result = await self._session.execute(
            select(SchedulePreference).where(SchedulePreference.enrollment_id == enrollment_id)
        )
        return result.scalar_one_or_none()

    async def list_by_ids(self, ids: list[int]) -> dict[int, SchedulePreference]:
        if not ids:
            return {}
        result = await self._session.execute(
            select(SchedulePreference).where(SchedulePreference.id.in_(ids))
        )
        return {pref.id: pref for pref in result.scalars().all()}

    async def create(self, entity: SchedulePreference) -> SchedulePreference:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: int, updates: dict) -> SchedulePreference | None:
        preference = await self.get(id)
        if preference:
            for key, value in updates.items():
                if hasattr(preference, key):
                    setattr(preference, key, value)
            await self._session.flush()
        return preference
