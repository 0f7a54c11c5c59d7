"""Logging setup for the gameweek CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'fantasy_cricket'
LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s: %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Send the package's log records to stderr and, optionally, to a file.

    Stdout is left to the CLI's own report. Calling this again replaces the
    handlers installed by the previous call.

    Args:
        level: Minimum level to emit (default: INFO)
        log_file: Also append records here; parent directories are created

    Returns:
        The ``fantasy_cricket`` package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
