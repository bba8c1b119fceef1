"""Logging setup and Logfire cloud observability."""

import logging
from typing import Optional

import logfire
from fastapi import FastAPI
from sqlalchemy.engine import Engine

from friday import __version__
from friday.config import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Route all package logs through one stream handler on the root logger."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def initialize_logfire(
    settings: Settings,
    app: Optional[FastAPI] = None,
    engine: Optional[Engine] = None,
) -> bool:
    """
    Initialize Logfire and instrument the service.

    Instruments:
    - FastAPI request handling (when ``app`` is given)
    - SQLAlchemy queries (when ``engine`` is given)
    - Python logging (bridged to Logfire through the root logger)

    Returns:
        True when Logfire was configured. Observability is optional, so a
        missing token or an instrumentation failure only logs a warning.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="friday-leaderboard",
            service_version=__version__,
            environment=settings.environment,
        )

        if app is not None:
            logfire.instrument_fastapi(app)
        if engine is not None:
            logfire.instrument_sqlalchemy(engine=engine)

        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        logger.info("Logfire cloud tracking initialized")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
