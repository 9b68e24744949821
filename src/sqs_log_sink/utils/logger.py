"""
Module: logger.py
Description: Structured logging configuration for the SQS log sink.

Configures structlog for JSON output on stderr. This is the sink's
own operational log, kept apart from the application logging it
forwards: the loggers write directly to the stream and never pass
through stdlib logging handlers, so the sink cannot end up logging
into itself. The processor chain is bound per logger rather than
through structlog.configure() so the host application's structlog
setup is left untouched.

Key Components:
- JSON output with timestamp, level and logger name
- Level filtering from SinkSettings.log_level (per sink, or the
  SQS_LOG_SINK_LOG_LEVEL environment default for module loggers)
- get_logger() helper function

Dependencies: structlog, datetime, logging
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog

from ..config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


PROCESSORS = [
    _add_timestamp,
    _add_log_level,
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def get_logger(name: str, log_level: Optional[str] = None):
    """
    Get a configured structlog logger instance.

    Creates a logger with the specified name that outputs JSON
    formatted lines on stderr. Records below `log_level` are dropped;
    without one the level comes from the environment settings.

    Args:
        name: Logger name (typically __name__)
        log_level: Level name such as "WARNING"

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("SQS transport started", queue_url=url)
        {"logger_name": "...", "queue_url": "...", "event": "SQS transport started", ...}
    """
    return structlog.wrap_logger(
        structlog.WriteLogger(sys.stderr),
        processors=PROCESSORS,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level or settings.log_level)
        ),
        logger_name=name,
    )
