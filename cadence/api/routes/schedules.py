"""API routes for an enrollment's schedule: preferences, generation and pausing."""
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.api.routes.dependencies import get_current_user_id, get_reference_date
from cadence.db.database import get_db
from cadence.schemas.schedule import (
    DefaultPreferences,
    ScheduledWorkoutResponse,
    ScheduleGenerateRequest,
    ScheduleGenerateResponse,
    SchedulePauseRequest,
    SchedulePreferenceResponse,
    SchedulePreferenceUpdate,
    ScheduleResponse,
)
from cadence.services.program_schedule import ProgramScheduleService
from cadence.services.schedule_preferences import SchedulePreferenceService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{enrollment_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(
    enrollment_id: int,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Return the enrollment's calendar, or default preferences if none was generated yet."""
    service = ProgramScheduleService(db)
    generated = await service.get_schedule(enrollment_id, user_id, start_date, end_date)

    if generated is None:
        logger.info("get_schedule: enrollment_id=%s has no schedule yet", enrollment_id)
        defaults = SchedulePreferenceService(db).defaults()
        return ScheduleResponse(
            schedule=None,
            preferences=DefaultPreferences(**defaults),
            needs_generation=True,
        )

    return ScheduleResponse(
        schedule=SchedulePreferenceResponse.model_validate(generated.schedule),
        scheduled_workouts=[ScheduledWorkoutResponse.model_validate(w) for w in generated.scheduled_workouts],
        needs_generation=not generated.scheduled_workouts,
    )


@router.put("/{enrollment_id}/schedule", response_model=SchedulePreferenceResponse)
async def update_schedule_preferences(
    enrollment_id: int,
    request: SchedulePreferenceUpdate,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Create or patch the enrollment's schedule preferences. Existing dates are not moved."""
    preference = await SchedulePreferenceService(db).upsert(
        enrollment_id, user_id, request.model_dump(exclude_none=True)
    )
    return SchedulePreferenceResponse.model_validate(preference)


@router.post(
    "/{enrollment_id}/schedule",
    response_model=ScheduleGenerateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_schedule(
    enrollment_id: int,
    request: ScheduleGenerateRequest | None = None,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    today: date = Depends(get_reference_date),
):
    """Place every program workout on the calendar."""
    request = request or ScheduleGenerateRequest()
    logger.info(
        "generate_schedule: enrollment_id=%s user_id=%s regenerate=%s",
        enrollment_id, user_id, request.regenerate,
    )

    generated = await ProgramScheduleService(db).place_program_schedule(
        enrollment_id,
        user_id,
        today=today,
        preferences=request.preferences.model_dump(exclude_none=True) if request.preferences else None,
        start_date=request.start_date,
        regenerate=request.regenerate,
    )

    return ScheduleGenerateResponse(
        schedule=SchedulePreferenceResponse.model_validate(generated.schedule),
        scheduled_workouts=[ScheduledWorkoutResponse.model_validate(w) for w in generated.scheduled_workouts],
        total_workouts=generated.total_workouts,
        start_date=generated.start_date,
        end_date=generated.end_date,
    )


@router.post("/{enrollment_id}/schedule/pause", response_model=SchedulePreferenceResponse)
async def pause_schedule(
    enrollment_id: int,
    request: SchedulePauseRequest,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    preference = await SchedulePreferenceService(db).pause(
        enrollment_id, user_id, request.paused_until, request.pause_reason
    )
    return SchedulePreferenceResponse.model_validate(preference)


@router.post("/{enrollment_id}/schedule/resume", response_model=SchedulePreferenceResponse)
async def resume_schedule(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    preference = await SchedulePreferenceService(db).resume(enrollment_id, user_id)
    return SchedulePreferenceResponse.model_validate(preference)
