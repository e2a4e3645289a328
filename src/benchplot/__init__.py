"""
benchplot: charts for benchmark reports.

This package provides:
- Chart assemblers that turn estimates, samples and KDE curves into Plotly
  chart descriptions (ChartGenerator)
- Group summaries comparing sibling benchmarks (summarize)
- Out-of-process rendering with explicit handles (Renderer, PendingRenders)
- Logging utilities for library and application use

For logging configuration in scripts:
    ```python
    from benchplot.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from benchplot.utils.logging import configure_logging, get_logger

# Keep records away from the root logger until an application configures logging.
_logger = logging.getLogger("benchplot")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
