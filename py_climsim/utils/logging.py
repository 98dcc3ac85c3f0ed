"""Structured logging setup shared by scripts and the simulation pipeline."""

import logging
from typing import Optional

import structlog

from ..config.config import Settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        settings: Runtime settings; log level and format are read from it
    """
    if settings is None:
        from ..config.config import settings as default_settings

        settings = default_settings

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
