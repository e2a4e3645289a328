"""Utility functions for benchplot."""

from .fs import load_json, mkdirp
from .logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "load_json",
    "mkdirp",
]
