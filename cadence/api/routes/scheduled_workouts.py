"""API routes for individual scheduled workouts and auto-reschedule."""
import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.api.routes.dependencies import get_current_user_id, get_reference_date, require_admin
from cadence.db.database import get_db
from cadence.schemas.schedule import (
    AutoRescheduleRequest,
    AutoRescheduleResponse,
    MissedSweepRequest,
    MissedSweepResponse,
    ScheduledWorkoutResponse,
    ScheduledWorkoutUpdate,
    ScheduledWorkoutUpdateResponse,
)
from cadence.services.auto_reschedule import AutoRescheduleService
from cadence.services.workout_ledger import WorkoutLedgerService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/workouts/{workout_id}", response_model=ScheduledWorkoutResponse)
async def get_scheduled_workout(
    workout_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    workout = await WorkoutLedgerService(db).get_scheduled_workout(workout_id, user_id)
    return ScheduledWorkoutResponse.model_validate(workout)


@router.put("/workouts/{workout_id}", response_model=ScheduledWorkoutUpdateResponse)
async def update_scheduled_workout(
    workout_id: int,
    request: ScheduledWorkoutUpdate,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Reschedule, skip, complete, unschedule or annotate one workout."""
    logger.info("update_scheduled_workout: workout_id=%s action=%s", workout_id, request.action.value)
    params = request.model_dump(exclude={"action"}, exclude_none=True)
    workout = await WorkoutLedgerService(db).update_scheduled_workout(
        workout_id, user_id, request.action, params
    )
    return ScheduledWorkoutUpdateResponse(workout=ScheduledWorkoutResponse.model_validate(workout))


@router.delete("/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scheduled_workout(
    workout_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    await WorkoutLedgerService(db).delete_scheduled_workout(workout_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/auto-reschedule", response_model=AutoRescheduleResponse)
async def auto_reschedule(
    request: AutoRescheduleRequest | None = None,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    today: date = Depends(get_reference_date),
):
    """Move the caller's missed workouts onto free preferred days."""
    request = request or AutoRescheduleRequest()
    summary = await AutoRescheduleService(db).auto_reschedule(
        user_id,
        today,
        schedule_id=request.schedule_id,
        workout_ids=request.workout_ids,
        strategy=request.strategy,
        start_from=request.start_from_date,
    )
    logger.info(
        "auto_reschedule: user_id=%s strategy=%s rescheduled=%s",
        user_id, summary.strategy.value, summary.total_rescheduled,
    )

    return AutoRescheduleResponse(
        message=summary.message,
        strategy=summary.strategy,
        rescheduled=[asdict(item) for item in summary.rescheduled],
        total_rescheduled=summary.total_rescheduled,
        not_rescheduled=[asdict(item) for item in summary.not_rescheduled],
        skipped_schedules=[asdict(item) for item in summary.skipped_schedules],
    )


@router.post("/missed-sweep", response_model=MissedSweepResponse)
async def missed_sweep(
    request: MissedSweepRequest | None = None,
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_admin),
    today: date = Depends(get_reference_date),
):
    """Mark past-due workouts as missed, optionally repairing them right away."""
    request = request or MissedSweepRequest()
    reference_date = request.reference_date or today

    affected = await WorkoutLedgerService(db).sweep_missed(reference_date)
    user_ids = sorted({user_id for _, user_id in affected})

    total_rescheduled = 0
    if request.auto_reschedule and user_ids:
        total_rescheduled = await AutoRescheduleService(db).reschedule_for_users(
            user_ids, reference_date, request.strategy
        )

    logger.info(
        "missed_sweep: reference_date=%s missed=%s users=%s rescheduled=%s",
        reference_date, len(affected), len(user_ids), total_rescheduled,
    )
    return MissedSweepResponse(
        missed_count=len(affected),
        users_affected=len(user_ids),
        total_rescheduled=total_rescheduled,
    )
