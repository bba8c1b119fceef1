"""FRIDAY leaderboard CLI entry point."""

import argparse
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

load_dotenv()

from friday import __version__
from friday.backup import BackupError, run_backup
from friday.config import get_settings
from friday.database import Database
from friday.observability import configure_logging, initialize_logfire

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    from friday.api import create_app

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port

    print("\n=== FRIDAY Leaderboard API ===\n")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.environment}")
    print(f"Database: {settings.database_path}")
    print(f"Listening on {host}:{port}\n")

    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Create the data directory and the submissions schema."""
    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        database.ensure_schema()
    finally:
        database.dispose()

    print(f"\n✓ Database initialized at {settings.database_path}\n")
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    """Snapshot, compress, upload and prune once."""
    settings = get_settings()
    initialize_logfire(settings)
    try:
        report = run_backup(settings)
    except BackupError as e:
        logger.error(f"Backup failed: {e}")
        print(f"\n❌ Backup failed: {e}\n")
        return 1

    print(f"\n✓ Backup written: {report.archive} ({report.size_bytes / 1024:.2f} KB)")
    if report.uploaded_to:
        print(f"Uploaded to: {report.uploaded_to}")
    if report.upload_error:
        print(f"Upload failed: {report.upload_error}")
    print(f"Deleted {len(report.deleted)} old backups\n")
    return 0


def cmd_schedule_backups(args: argparse.Namespace) -> int:
    """Run backups on an interval until interrupted."""
    from friday.scheduler import start_scheduler

    settings = get_settings()
    initialize_logfire(settings)
    start_scheduler(settings)
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="friday",
        description="FRIDAY security audit leaderboard service",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"FRIDAY Leaderboard {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_serve = subparsers.add_parser("serve", help="Start the HTTP API")
    parser_serve.add_argument("--host", help="Bind address (default: HOST)")
    parser_serve.add_argument("--port", type=int, help="Bind port (default: PORT)")
    parser_serve.set_defaults(func=cmd_serve)

    parser_init = subparsers.add_parser("init", help="Create the data directory and schema")
    parser_init.set_defaults(func=cmd_init)

    parser_backup = subparsers.add_parser("backup", help="Run one database backup")
    parser_backup.set_defaults(func=cmd_backup)

    parser_schedule = subparsers.add_parser(
        "schedule-backups",
        help="Run database backups every BACKUP_INTERVAL_HOURS",
    )
    parser_schedule.set_defaults(func=cmd_schedule_backups)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"\n❌ Invalid configuration:\n{e}\n")
        return 1

    configure_logging(settings.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
