"""Logging setup for the ``shardplan`` logger tree."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
"""Per-item assignment detail (console verbosity 3)."""

TRACE_ALL = 1
"""Coalescing rounds and partition contents (console verbosity 4)."""

_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG, TRACE, TRACE_ALL)

MAX_VERBOSITY = len(_VERBOSITY_LEVELS) - 1

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(TRACE_ALL, "TRACE_ALL")


def verbosity_to_level(verbosity: int) -> int:
    """Map a 0..4 console verbosity to a logging level (clamped)."""
    index = min(max(verbosity, 0), MAX_VERBOSITY)
    return _VERBOSITY_LEVELS[index]


def setup_logging(verbosity: int = 0, console: Console | None = None) -> logging.Logger:
    """Install a single rich handler on the ``shardplan`` logger.

    Output goes to stderr so that stdout stays machine readable.
    Calling this again replaces the previous handler.
    """
    root_logger = logging.getLogger("shardplan")
    root_logger.setLevel(verbosity_to_level(verbosity))
    root_logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.propagate = True
    return root_logger
