"""Unit Tests: backup scheduling."""

from datetime import timedelta

from friday.scheduler import backup_job, build_scheduler


def test_backup_job_registered(settings):
    scheduler = build_scheduler(settings)

    jobs = scheduler.get_jobs()

    assert [job.id for job in jobs] == ["database-backup"]
    assert jobs[0].trigger.interval == timedelta(hours=settings.backup_interval_hours)
    assert jobs[0].max_instances == 1


def test_backup_job_logs_failures(settings, caplog):
    # No database file yet, so the run fails without raising.
    backup_job(settings)
    assert "Backup failed" in caplog.text
