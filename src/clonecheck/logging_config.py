"""Logging setup for extraction and verification runs."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from clonecheck.config import settings

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Log per navigation or per link; kept at INFO unless verbose
CHATTY_LOGGERS = ('clonecheck.infrastructure', 'clonecheck.extractor')


def resolve_level(level: Union[str, int, None]) -> int:
    """Numeric log level for a name like "debug"; unknown names give INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: Union[str, int, None] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """Configure the root logger for a verification run.

    Args:
        level: Log level name or number, defaults to LOG_LEVEL
        log_file: Optional log file path, defaults to LOG_FILE
        format_string: Optional custom format string
        verbose: Let per-navigation and per-link messages through at DEBUG
    """
    numeric_level = resolve_level(level)
    log_file = log_file or settings.LOG_FILE

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True  # Replace handlers from earlier runs
    )

    chatty_level = numeric_level if verbose else max(numeric_level, logging.INFO)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
