"""
tstruct Logging Utilities

Overview:
---------
Every module logs through a child of the ``tstruct`` logger.  As a library,
tstruct installs only a ``NullHandler``; applications that want to see
registration activity call :func:`setup_logging` once at startup.

Log Levels:
-----------
- DEBUG: installed registry names, chained field setters, idempotent skips
- INFO: completed registrations
- WARNING: rejected registrations

Usage:
------
    from tstruct.utils.logging import get_logger, setup_logging

    # Call once at startup (optional)
    setup_logging(level="DEBUG")

    # Get logger in any module
    logger = get_logger(__name__)
    logger.debug("Registering schema...")
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

# ============================================================================
# Constants
# ============================================================================

ROOT_LOGGER_NAME = "tstruct"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


# ============================================================================
# Setup Functions
# ============================================================================

def setup_logging(
    level: Optional[str] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Configure the ``tstruct`` logger.

    Parameters
    ----------
    level : str, optional
        Log level: DEBUG, INFO, WARNING, ERROR. Defaults to the configured
        ``log_level`` (``TSTRUCT_LOG_LEVEL`` environment variable).
    console_output : bool
        If True, log to stderr. Default True.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    if level is None:
        from tstruct.config import get_config

        level = get_config().log_level
    log_level = getattr(logging, level.upper(), logging.WARNING)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            root.removeHandler(handler)
    root.setLevel(log_level)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root.addHandler(console_handler)

    # Prevent propagation to root logger (avoid duplicate logs)
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Names outside the ``tstruct`` namespace are nested under it.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
