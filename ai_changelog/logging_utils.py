"""
Logging helpers for ai-changelog.

Progress output and the changelog preview go to stdout, so log records
are always written to stderr. Every module logs through its own
``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Libraries that log every request or keystroke at DEBUG.
QUIET_LOGGERS = ("urllib3", "prompt_toolkit", "asyncio")


def verbosity_to_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int, stream: Optional[TextIO] = None) -> None:
    """
    Configure logging based on the CLI verbosity count.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG, for ai-changelog's own loggers only

    Third-party loggers never drop below WARNING.
    """

    level = verbosity_to_level(verbosity)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream or sys.stderr)
    logging.getLogger().setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
