"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cadence.config.settings import get_settings
from cadence.core.error_handlers import register_error_handlers
from cadence.core.logging import configure_logging
from cadence.db.database import close_all_engines, init_db
from cadence.middleware import RequestIDMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()

    # Startup: create tables when running without migrations
    await init_db()

    yield

    try:
        await close_all_engines()
    except Exception as e:
        logger.warning("Failed to close database engines: %s", e)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Places training program workouts on a personal calendar and repairs it when workouts are missed",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    from cadence.api.routes import (
        health_router,
        schedules_router,
        scheduled_workouts_router,
    )

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(schedules_router, prefix="/enrollments", tags=["Schedules"])
    app.include_router(scheduled_workouts_router, prefix="/schedule", tags=["Scheduled Workouts"])

    return app


app = create_app()
