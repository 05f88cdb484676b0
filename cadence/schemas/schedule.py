"""Pydantic schemas for schedule preferences, scheduled workouts and auto-reschedule."""
from datetime import date, datetime

from pydantic import BaseModel, Field

from cadence.models.enums import RescheduleStrategy, ScheduledWorkoutStatus, WorkoutAction


# ============== Schedule preferences ==============

class SchedulePreferenceUpdate(BaseModel):
    """Preference fields accepted on create/update.

    Omitted fields keep their current value (or the configured default on
    create). Range checks happen in the service so they surface as domain
    validation errors.
    """

    preferred_days: list[int] | None = Field(None, description="Weekdays, 0=Sunday ... 6=Saturday")
    preferred_time_slot: str | None = Field(None, description="morning, afternoon, evening or late_night")
    reminder_time: str | None = Field(None, description="HH:MM")
    auto_reschedule_enabled: bool | None = None
    reschedule_window_weeks: int | None = None
    min_rest_days: int | None = None
    max_consecutive_workout_days: int | None = None


class SchedulePreferenceResponse(BaseModel):
    id: int
    enrollment_id: int
    preferred_days: list[int]
    preferred_time_slot: str | None
    reminder_time: str | None
    auto_reschedule_enabled: bool
    reschedule_window_weeks: int
    min_rest_days: int
    max_consecutive_workout_days: int
    paused_until: date | None
    pause_reason: str | None
    last_schedule_generated_at: datetime | None

    class Config:
        from_attributes = True


class DefaultPreferences(BaseModel):
    preferred_days: list[int]
    auto_reschedule_enabled: bool
    reschedule_window_weeks: int
    min_rest_days: int
    max_consecutive_workout_days: int


class SchedulePauseRequest(BaseModel):
    paused_until: date
    pause_reason: str | None = None


# ============== Scheduled workouts ==============

class ProgramWorkoutSummary(BaseModel):
    id: int
    name: str
    focus: str | None = None
    week_number: int
    day_number: int
    estimated_duration: int | None = None

    class Config:
        from_attributes = True


class ScheduledWorkoutResponse(BaseModel):
    id: int
    schedule_id: int
    scheduled_date: date
    scheduled_time: str | None
    original_date: date | None
    status: ScheduledWorkoutStatus
    rescheduled_count: int
    rescheduled_from: date | None
    rescheduled_reason: str | None
    skipped_reason: str | None
    skipped_at: datetime | None
    completed_at: datetime | None
    completed_workout_session_ref: str | None
    notes: str | None
    program_workout: ProgramWorkoutSummary | None = None

    class Config:
        from_attributes = True


class ScheduledWorkoutUpdate(BaseModel):
    action: WorkoutAction
    # reschedule
    new_date: date | None = None
    new_time: str | None = None
    reschedule_reason: str | None = None
    # skip
    skip_reason: str | None = None
    # complete
    workout_session_id: str | None = None
    # update
    notes: str | None = None


class ScheduledWorkoutUpdateResponse(BaseModel):
    success: bool = True
    workout: ScheduledWorkoutResponse


# ============== Schedule generation ==============

class ScheduleGenerateRequest(BaseModel):
    preferences: SchedulePreferenceUpdate | None = None
    start_date: date | None = None
    regenerate: bool = False


class ScheduleGenerateResponse(BaseModel):
    success: bool = True
    schedule: SchedulePreferenceResponse
    scheduled_workouts: list[ScheduledWorkoutResponse]
    total_workouts: int
    start_date: date | None
    end_date: date | None


class ScheduleResponse(BaseModel):
    schedule: SchedulePreferenceResponse | None
    preferences: DefaultPreferences | None = None
    scheduled_workouts: list[ScheduledWorkoutResponse] = Field(default_factory=list)
    needs_generation: bool


# ============== Auto-reschedule ==============

class AutoRescheduleRequest(BaseModel):
    schedule_id: int | None = Field(None, description="Only repair this schedule")
    workout_ids: list[int] | None = Field(None, description="Only repair these scheduled workouts")
    start_from_date: date | None = Field(None, description="Search for new dates after this date")
    strategy: RescheduleStrategy = RescheduleStrategy.NEXT_AVAILABLE


class RescheduledWorkoutResponse(BaseModel):
    workout_id: int
    workout_name: str
    old_date: date
    new_date: date


class NotRescheduledResponse(BaseModel):
    workout_id: int
    workout_name: str
    missed_date: date
    reason: str


class SkippedScheduleResponse(BaseModel):
    schedule_id: int
    reason: str


class AutoRescheduleResponse(BaseModel):
    success: bool = True
    message: str | None = None
    strategy: RescheduleStrategy
    rescheduled: list[RescheduledWorkoutResponse]
    total_rescheduled: int
    not_rescheduled: list[NotRescheduledResponse] = Field(default_factory=list)
    skipped_schedules: list[SkippedScheduleResponse] = Field(default_factory=list)


# ============== Missed sweep ==============

class MissedSweepRequest(BaseModel):
    reference_date: date | None = Field(None, description="Rows dated before this day become missed; defaults to today")
    auto_reschedule: bool = False
    strategy: RescheduleStrategy = RescheduleStrategy.NEXT_AVAILABLE


class MissedSweepResponse(BaseModel):
    success: bool = True
    missed_count: int
    users_affected: int
    total_rescheduled: int = 0
