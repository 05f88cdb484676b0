"""Enumerations shared by models, schemas and services."""
from enum import Enum


class ScheduledWorkoutStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    MISSED = "missed"
    # Label for the moment of a reschedule; rows are persisted back as SCHEDULED.
    RESCHEDULED = "rescheduled"


class WorkoutAction(str, Enum):
    RESCHEDULE = "reschedule"
    SKIP = "skip"
    COMPLETE = "complete"
    UNSCHEDULE = "unschedule"
    UPDATE = "update"


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    LATE_NIGHT = "late_night"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    QUIT = "quit"


class RescheduleStrategy(str, Enum):
    NEXT_AVAILABLE = "next_available"
    END_OF_SCHEDULE = "end_of_schedule"
    SPREAD_EVENLY = "spread_evenly"
