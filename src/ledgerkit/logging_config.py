"""Logging configuration for ledgerkit.

Modules log through ``logging.getLogger(__name__)``; nothing is emitted until
an application calls ``setup_logging``.
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "LEDGERKIT_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``ledgerkit`` package logger.

    Args:
        level: Level name (DEBUG, INFO, ...). Defaults to LEDGERKIT_LOG_LEVEL,
            then WARNING.
        log_file: Optional file to log to instead of stderr

    Returns:
        The package logger
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level_name}'")

    logger = logging.getLogger("ledgerkit")
    logger.setLevel(numeric_level)

    # Replace handlers so repeated calls do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
