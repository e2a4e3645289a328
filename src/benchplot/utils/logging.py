"""
Logging utilities for the benchplot library.

Library code only ever asks for a logger:
    ```python
    from benchplot.utils.logging import get_logger
    logger = get_logger(__name__)
    logger.info("Rendering %s", path)
    ```

Scripts and applications that want to see output call configure_logging():
    ```python
    from benchplot.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When benchplot is imported by a benchmark harness that has configured logging,
all benchplot records flow into that application's handlers.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

# Render workers log to the same stderr as the parent, so records carry the pid.
DEFAULT_FMT = "%(asctime)s [%(levelname)s] pid=%(process)d %(name)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_ENV = "BENCHPLOT_LOG_LEVEL"


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def configure_logging(level: Optional[Union[str, int]] = None, *, force: bool = False) -> None:
    """
    Send benchplot records to stderr (the benchplot logger only, never root).

    Called by the render worker on startup, and by scripts that drive the
    report. The level is re-applied on every call; a stderr handler is added
    only once.

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to the BENCHPLOT_LOG_LEVEL
        env var, which the render worker inherits from its parent, or "INFO".
    force:
        Drop existing handlers (including the package NullHandler) first.
    """
    level = _resolve_level(level)
    logger = logging.getLogger("benchplot")
    logger.setLevel(level)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)

    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
            h.setLevel(level)
            return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=DEFAULT_FMT, datefmt=DEFAULT_DATEFMT))
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    If name is None, returns the 'benchplot' package logger.
    """
    if name is None:
        name = "benchplot"
    return logging.getLogger(name)
