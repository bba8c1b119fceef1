"""Health check route."""

import time

from fastapi import APIRouter, Depends, Request

from friday.api.dependencies import get_app_settings
from friday.api.middleware import COLD_START_SECONDS
from friday.config import Settings
from friday.database import Database, get_database
from friday.schemas import HealthResponse
from friday.utils.time_utils import utc_iso_now

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    request: Request,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """Liveness plus store connectivity, for load balancers and monitoring."""
    db_connected = database.check_connection()
    uptime = int(time.monotonic() - request.app.state.started_at)

    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        timestamp=utc_iso_now(),
        version=settings.app_version,
        environment=settings.environment,
        database="connected" if db_connected else "disconnected",
        database_size=database.file_size(),
        uptime=uptime,
        cold_start=uptime < COLD_START_SECONDS,
        instance_id=settings.render_instance_id,
    )
