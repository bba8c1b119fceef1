"""Admin API routes."""

import logging
import time
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from friday.api.dependencies import (
    PageParams,
    get_app_settings,
    get_leaderboard_service,
    page_params,
    require_admin,
)
from friday.backup import BackupError, export_snapshot
from friday.config import Settings
from friday.database import Database, get_database
from friday.errors import StoreFailure
from friday.schemas import AdminSubmissionsResponse, ErrorResponse
from friday.services import LeaderboardService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000
EXPORT_FILENAME = "friday-leaderboard-backup.db"


def _remove_export(path: Path) -> None:
    path.unlink(missing_ok=True)


@router.get("/submissions", response_model=AdminSubmissionsResponse)
def list_submissions(
    page: PageParams = Depends(page_params(DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """All submissions, newest first, including client address and user agent."""
    return service.list_submissions(page.limit, page.offset)


@router.get("/backup")
def download_backup(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """Consistent snapshot of the store as a file download."""
    target = settings.data_dir / f"backup_{int(time.time() * 1000)}.db"
    try:
        export_snapshot(database, target)
    except BackupError as e:
        logger.error(f"Backup export failed: {e}")
        raise StoreFailure("Backup failed", detail=str(e)) from e

    logger.info(f"Serving backup export {target.name}")
    return FileResponse(
        target,
        media_type="application/octet-stream",
        filename=EXPORT_FILENAME,
        background=BackgroundTask(_remove_export, target),
    )
