"""Structured logging configuration using structlog.

Provides JSON output for production and human-readable console output for development.
All logging throughout the project should use get_logger() instead of print().
Every event carries a `component` field naming the draftsync module that emitted
it (e.g. "reconciler", "batch"), so the schedule and assignment flows can be
filtered apart.
"""

import logging
import sys

import structlog

PACKAGE_PREFIX = "draftsync."


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog with appropriate processors and output format.

    Args:
        json_output: If True, output JSON (production). If False, console format (dev).
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Convert string log level to logging constant
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Configure structlog processors
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    # Add renderer based on output format
    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging to structlog
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    logging.getLogger().handlers = []
    logging.getLogger().addHandler(logging.StreamHandler(sys.stdout))


def setup_logging_from_config() -> None:
    """Configure logging from the DRAFTSYNC_LOG_* settings."""
    from draftsync.config import get_config

    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)


def component_name(name: str) -> str:
    """Short component label for a module name ("draftsync.batch" -> "batch")."""
    if name.startswith(PACKAGE_PREFIX):
        return name[len(PACKAGE_PREFIX):]
    return name


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance bound with the module's component name.

    The component is passed as an initial value, so the logger stays lazy and
    picks up whatever setup_logging() configured before its first use.

    Args:
        name: Logger name (typically __name__ from calling module).

    Returns:
        Configured structlog logger with `component` context.
    """
    return structlog.get_logger(name, component=component_name(name))
