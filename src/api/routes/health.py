"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from src.api.dependencies import get_app_settings
from src.application.dto.responses import HealthResponse
from src.config import Settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Basic health check with uptime."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        database={"uptime_seconds": round(time.time() - _start_time, 2)},
    )


@router.get("/db", response_model=HealthResponse)
async def db_health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity and reports the applied schema version.
    """
    from src.infrastructure.storage.sqlite import get_connection
    from src.infrastructure.storage.sqlite.migrations import get_current_version

    database: dict = {"name": "sqlite", "available": False}

    try:
        start = time.time()
        async with get_connection() as conn:
            await conn.execute("SELECT 1")
            version = await get_current_version(conn)
        database.update(
            available=True,
            schema_version=version,
            latency_ms=round((time.time() - start) * 1000, 2),
        )

    except Exception as e:
        database["error"] = str(e)

    return HealthResponse(
        status="healthy" if database["available"] else "unhealthy",
        version=settings.app_version,
        environment=settings.environment,
        database=database,
    )
