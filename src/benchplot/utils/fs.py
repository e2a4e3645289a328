"""Filesystem helpers used while scanning benchmark result directories."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from benchplot.utils.logging import get_logger

logger = get_logger(__name__)


def load_json(path: str | os.PathLike) -> Optional[Any]:
    """Read and parse a JSON file, returning None on any failure.

    Missing files, unreadable files and malformed JSON are all treated the
    same way: the caller gets None and decides whether that matters.
    """
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Could not load {p}: {e}")
        return None


def mkdirp(path: str | os.PathLike) -> Path:
    """Create a directory and all missing parents.

    Raises:
        OSError: If the directory cannot be created.
    """
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p
