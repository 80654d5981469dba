"""
Logging for deflist-markdown, built on Loguru.

The package logs through the shared ``loguru.logger`` but stays silent
until an application opts in: ``deflist_markdown`` is disabled on import
and `configure_logging` enables it together with a stderr sink.

Verbosity levels:
    0 = Warnings only (default)
    1 = Info
    2 = Debug (engine lifecycle, rescan reasons, oracle misses)
    3 = Trace (per-line scan decisions)
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from loguru import logger

PACKAGE_NAME = "deflist_markdown"

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

_LEVELS = {0: "WARNING", 1: "INFO", 2: "DEBUG", 3: "TRACE"}

_sink_id: int | None = None


def verbosity_to_level(verbosity: int) -> str:
    """Translate a ``-v`` count into a Loguru level name."""
    return _LEVELS[max(0, min(verbosity, 3))]


def configure_logging(verbosity: int = 0, sink: TextIO | Any = None) -> int:
    """Install the package's log sink and enable its messages.

    Any previously installed handlers, Loguru's default one included, are
    removed first.

    Args:
        verbosity: Number of ``-v`` flags given on the command line.
        sink: Destination for log records; defaults to ``sys.stderr``.

    Returns:
        int: Loguru handler id of the installed sink.
    """
    global _sink_id

    logger.remove()  # Remove default handler
    _sink_id = logger.add(
        sink if sink is not None else sys.stderr,
        format=logger_format,
        level=verbosity_to_level(verbosity),
        filter=PACKAGE_NAME,
    )
    logger.enable(PACKAGE_NAME)
    return _sink_id


def disable_logging() -> None:
    """Remove the package sink and silence the package again."""
    global _sink_id

    if _sink_id is not None:
        logger.remove(_sink_id)
        _sink_id = None
    logger.disable(PACKAGE_NAME)
