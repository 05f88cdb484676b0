from cadence.models.enums import (
    EnrollmentStatus,
    RescheduleStrategy,
    ScheduledWorkoutStatus,
    TimeSlot,
    WorkoutAction,
)
from cadence.models.program import Program, ProgramEnrollment, ProgramWorkout
from cadence.models.schedule import SchedulePreference, ScheduledWorkout

__all__ = [
    "EnrollmentStatus",
    "RescheduleStrategy",
    "ScheduledWorkoutStatus",
    "TimeSlot",
    "WorkoutAction",
    "Program",
    "ProgramEnrollment",
    "ProgramWorkout",
    "SchedulePreference",
    "ScheduledWorkout",
]
