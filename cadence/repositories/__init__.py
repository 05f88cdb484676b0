"""Repositories package."""
from cadence.repositories.base import Repository
from cadence.repositories.program_repository import ProgramRepository
from cadence.repositories.schedule_preference_repository import SchedulePreferenceRepository
from cadence.repositories.scheduled_workout_repository import ScheduledWorkoutRepository

__all__ = [
    "Repository",
    "ProgramRepository",
    "SchedulePreferenceRepository",
    "ScheduledWorkoutRepository",
]
