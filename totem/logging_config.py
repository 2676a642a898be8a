"""Logging setup for Totem.

Library code only calls `get_logger()`; handlers are attached by the CLI (or an
embedding application) through `setup_logging()`.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .api.config.get_home_dir import get_home_dir
from .api.config.LogConfig import LogConfig
from .constants import LOG_FILE_NAME

ROOT_LOGGER_NAME = "totem"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Set on handlers installed by setup_logging() so they can be replaced later
_HANDLER_MARK = "_totem_handler"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Attach a file handler and a stderr handler to the `totem` logger.

    Args:
        level: Numeric level, or a level name as stored in `LogConfig`
        log_file: Log file path (default <home>/totem.log)
        format_string: Optional custom format string

    Calling it again replaces the handlers from the previous call.
    """
    if isinstance(level, str):
        level = LogConfig(level=level.upper()).numeric_level
    if log_file is None:
        log_file = get_home_dir(LOG_FILE_NAME)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = teardown_logging()
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    for handler in (logging.FileHandler(log_file, encoding="utf-8"), logging.StreamHandler(sys.stderr)):
        setattr(handler, _HANDLER_MARK, True)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)

    # Suppress noisy third-party loggers
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    return logger


def teardown_logging() -> logging.Logger:
    """Remove and close the handlers installed by `setup_logging()` and reset the level."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.NOTSET)
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)
        handler.close()
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
