"""Health check endpoints."""
import time
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config.settings import get_settings
from cadence.db.database import get_db

router = APIRouter()
settings = get_settings()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    app: str
    timestamp: str = Field(..., description="ISO 8601 timestamp of check")
    database: dict


async def check_database(db: AsyncSession) -> dict:
    try:
        start_time = time.time()
        await db.execute(text("SELECT 1"))
        response_time = (time.time() - start_time) * 1000
        return {"healthy": True, "response_time_ms": round(response_time, 2)}
    except Exception:
        return {"healthy": False, "response_time_ms": None}


@router.get("", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a primary database ping."""
    database = await check_database(db)
    return HealthCheckResponse(
        status="healthy" if database["healthy"] else "degraded",
        app=settings.app_name,
        timestamp=datetime.utcnow().isoformat(),
        database=database,
    )
