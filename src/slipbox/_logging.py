"""Logging setup for the sb command.

Library modules only ever do:

    import logging
    log = logging.getLogger(__name__)

Nothing is printed unless the CLI (or an embedding application) installs a
handler. SLIPBOX_LOG_LEVEL picks the level for the CLI handler:
    - DEBUG: batch sizes and per-item move decisions
    - INFO: default
    - WARNING: handled problems (unreadable notes, mirror or git failures)
    - ERROR: only failures
"""

import logging
import os
import sys

PACKAGE_LOGGER = "slipbox"


def _level_from_env() -> int:
    name = os.environ.get("SLIPBOX_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(quiet: bool = False) -> None:
    """Send slipbox log records to stderr.

    Safe to call more than once; the handler is only installed the first
    time. With quiet set, only errors get through.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
        # Records stop here so an application root handler doesn't print them twice
        logger.propagate = False

    level = logging.ERROR if quiet else _level_from_env()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
