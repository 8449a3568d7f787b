"""
Logging setup shared by the API process and the test suite.

- Console: stdout at LOG_LEVEL
- File: optional, daily rotation (TimedRotatingFileHandler) when LOG_FILE is set

Usage:
    from app.core.logging import setup_logging
    setup_logging()
    logger = logging.getLogger(__name__)
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from app.core.config import settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Driver loggers that log every command at DEBUG/INFO
NOISY_LOGGERS = [
    "pymongo",
    "motor",
    "asyncio",
]


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger.

    Existing root handlers are replaced so repeated calls (app reloads,
    tests) do not duplicate output.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_path = log_file if log_file is not None else settings.LOG_FILE
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path,
            when="midnight",
            interval=1,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info("Logging initialised at %s", logging.getLevelName(log_level))
    if file_path:
        root_logger.info("Log file: %s (daily rotation, %d kept)", file_path, settings.LOG_BACKUP_COUNT)

    return root_logger
