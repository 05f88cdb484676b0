"""API routes module."""
from cadence.api.routes.health import router as health_router
from cadence.api.routes.schedules import router as schedules_router
from cadence.api.routes.scheduled_workouts import router as scheduled_workouts_router

__all__ = [
    "health_router",
    "schedules_router",
    "scheduled_workouts_router",
]
