"""Periodic backup job using APScheduler."""

import logging
from typing import NoReturn

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from friday.backup import BackupError, run_backup
from friday.config import Settings

logger = logging.getLogger(__name__)


def backup_job(settings: Settings) -> None:
    """One scheduled run; failures are logged so the next run still happens."""
    try:
        run_backup(settings)
    except BackupError as e:
        logger.error(f"Backup failed: {e}")


def build_scheduler(settings: Settings) -> BlockingScheduler:
    """Scheduler with the backup job registered."""
    scheduler = BlockingScheduler()
    scheduler.add_job(
        backup_job,
        IntervalTrigger(hours=settings.backup_interval_hours),
        args=[settings],
        id="database-backup",
        name="Database Backup",
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Registered job: Database Backup (every {settings.backup_interval_hours} h)")
    return scheduler


def start_scheduler(settings: Settings) -> NoReturn:
    """Run backups forever in this process."""
    scheduler = build_scheduler(settings)
    try:
        logger.info("Scheduler starting...")
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Received interrupt signal")
        scheduler.shutdown()
        logger.info("Scheduler stopped cleanly")
