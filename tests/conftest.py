"""Shared fixtures: a throwaway SQLite database, seeded catalog rows and an API client."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import cadence.models  # noqa: F401
from cadence.api.routes.dependencies import get_current_user_id, get_reference_date
from cadence.core.locks import schedule_locks
from cadence.db.database import Base, create_primary_engine, get_db
from cadence.models import Program, ProgramEnrollment, ProgramWorkout

OWNER_ID = 1
OTHER_USER_ID = 2

# Monday
TODAY = date(2025, 1, 6)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_primary_engine(f"sqlite+aiosqlite:///{tmp_path / 'cadence.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()
    schedule_locks.clear()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def program(db):
    """Two weeks, three workouts per week."""
    program = Program(name="Base Strength", duration_weeks=2)
    program.workouts = [
        ProgramWorkout(week_number=week, day_number=day, name=f"Week {week} Day {day}", focus="strength")
        for week in (1, 2)
        for day in (1, 3, 5)
    ]
    db.add(program)
    await db.commit()
    return program


@pytest_asyncio.fixture
async def enrollment(db, program):
    enrollment = ProgramEnrollment(program_id=program.id, user_id=OWNER_ID)
    db.add(enrollment)
    await db.commit()
    return enrollment


@pytest_asyncio.fixture
async def other_enrollment(db, program):
    enrollment = ProgramEnrollment(program_id=program.id, user_id=OTHER_USER_ID)
    db.add(enrollment)
    await db.commit()
    return enrollment


@pytest_asyncio.fixture
async def empty_enrollment(db):
    program = Program(name="Empty", duration_weeks=1)
    db.add(program)
    await db.flush()
    enrollment = ProgramEnrollment(program_id=program.id, user_id=OWNER_ID)
    db.add(enrollment)
    await db.commit()
    return enrollment


@pytest.fixture
def api_app(session_maker):
    """Application wired to the test database, acting as OWNER_ID on TODAY."""
    from cadence.main import create_app

    app = create_app()

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: OWNER_ID
    app.dependency_overrides[get_reference_date] = lambda: TODAY
    return app


@pytest_asyncio.fixture
async def client(api_app, enrollment):
    async with AsyncClient(transport=ASGITransport(app=api_app), base_url="http://test") as ac:
        yield ac
