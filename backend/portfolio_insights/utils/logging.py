# backend/portfolio_insights/utils/logging.py
"""
Logging configuration for the portfolio insights engine.

setup_logging() installs a single stdout handler on the root logger. Every
record is stamped with the bound run id (see utils/context.py); LOG_FORMAT=json
switches to one JSON object per line for log aggregation.

Usage:
    from portfolio_insights.utils import setup_logging

    setup_logging()

Log Levels:
    DEBUG   - Per-holding valuation and attribution detail
    INFO    - One line per computed summary / insights pass
    WARNING - Excluded holdings (missing quote or FX rate), 1:1 FX fallbacks
    ERROR   - Failing external collaborators (price / FX / holdings sources)

Environment Configuration:
    LOG_LEVEL=DEBUG       # Per-holding valuation detail
    LOG_LEVEL=INFO        # Production
    LOG_FORMAT=json       # Machine-readable logs
    LOG_FORMAT=text       # Human-readable logs (default)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from portfolio_insights.config import settings
from portfolio_insights.utils.context import get_run_id

# =============================================================================
# CONSTANTS
# =============================================================================

# Default text format: timestamp | level | run_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(run_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Placeholder when no run id is bound
NO_RUN_ID = "no-run-id"

# Standard LogRecord attributes, never copied into the JSON "extra" block
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "run_id", "message", "taskName",
}


# =============================================================================
# RUN ID FILTER
# =============================================================================

class RunIdFilter(logging.Filter):
    """Logging filter that adds the bound run id to log records as 'run_id'."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id() or NO_RUN_ID
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123+00:00",
        "level": "WARNING",
        "logger": "portfolio_insights.services.valuation.calculators",
        "run_id": "abc123",
        "message": "Excluding AAPL: no price quote",
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", NO_RUN_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
) -> None:
    """
    Configure application-wide logging with run id support.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level.
        log_format: Output format ('text' or 'json').
                    Defaults to settings.log_format.
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)

    format_type = log_format or settings.log_format

    if format_type.lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt=DEFAULT_TEXT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RunIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={log_level_str}, format={format_type}",
        extra={"config": {"level": log_level_str, "format": format_type}},
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _get_log_level(level_str: str) -> int:
    """
    Map a LOG_LEVEL string ("info", "WARN") to its logging constant.

    Raises:
        ValueError: If level_str is not a valid log level
    """
    level_str = level_str.upper().strip()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {valid_levels}"
        )

    return level_mapping[level_str]


def get_logger(name: str) -> logging.Logger:
    """
    Return the named logger (usually __name__).

    The run id is added to every message by the filter installed in
    setup_logging().
    """
    return logging.getLogger(name)
