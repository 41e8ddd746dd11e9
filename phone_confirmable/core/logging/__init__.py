"""
Logging configuration module for structured logging.

This module configures the package's logging system using structlog, with
JSON output for production and human-readable console output for development.

The configuration includes:
- ISO timestamps
- Log level inclusion and filtering
- JSON/Console output based on settings
- Logger caching
"""

import logging

import structlog

from phone_confirmable.core.config.settings import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures the structlog pipeline.

    Args:
        log_level: Minimum level name; defaults to settings.LOG_LEVEL.
        json_logs: Render JSON instead of console output; defaults to settings.LOG_JSON.
    """
    level_name = (log_level or settings.LOG_LEVEL).upper()
    render_json = settings.LOG_JSON if json_logs is None else json_logs

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if render_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level_name)

