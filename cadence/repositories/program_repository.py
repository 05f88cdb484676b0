from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from cadence.models.program import ProgramWorkout


class ProgramRepository:
    """Read-only access to the program catalog."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_program_workouts(self, program_id: int) -> list[ProgramWorkout]:
        result = await self._session.execute(
            select(ProgramWorkout)
            .where(ProgramWorkout.program_id == program_id)
            .order_by(ProgramWorkout.week_number, ProgramWorkout.day_number, ProgramWorkout.id)
        )
        return list(result.scalars().all())
