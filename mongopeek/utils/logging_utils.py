"""Logging setup for mongopeek.

Modules use the standard pattern::

    import logging
    logger = logging.getLogger(__name__)

``setup_logging`` is called once by the CLI. It writes to a rotating file
rather than the console so log lines never land on top of the TUI.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from mongopeek.config.constants import (
    LOG_BACKUP_COUNT,
    LOG_FILE_NAME,
    MAX_LOG_BYTES,
    MONGOPEEK_CONFIG_DIR,
)

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the ``mongopeek`` logger hierarchy.

    The root logger is left alone; third-party libraries keep their own
    levels. Calling this again only adjusts the level.

    Returns:
        The ``mongopeek`` package logger.
    """
    package_logger = logging.getLogger("mongopeek")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if package_logger.handlers:
        return package_logger

    log_file = log_file or MONGOPEEK_CONFIG_DIR / LOG_FILE_NAME
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT
        )
    except OSError as e:
        # Fall back to stderr when the config directory is not writable
        print(f"Warning: cannot open log file {log_file}: {e}", file=sys.stderr)
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    package_logger.addHandler(handler)
    package_logger.propagate = False
    return package_logger
