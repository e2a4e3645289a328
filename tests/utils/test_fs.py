"""Tests for the filesystem and logging helpers."""

from __future__ import annotations

import logging
import os
import sys

import pytest

from benchplot.utils.fs import load_json, mkdirp
from benchplot.utils.logging import configure_logging, get_logger


def test_load_json(tmp_path) -> None:
    """Valid JSON is parsed; missing or malformed files give None."""
    good = tmp_path / "good.json"
    good.write_text('{"a": [1, 2]}', encoding="utf-8")
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")

    assert load_json(good) == {"a": [1, 2]}
    assert load_json(bad) is None
    assert load_json(tmp_path / "missing.json") is None
    assert load_json(tmp_path) is None  # a directory


def test_mkdirp_creates_parents(tmp_path) -> None:
    target = tmp_path / "a" / "b" / "c"
    assert mkdirp(target) == target
    assert target.is_dir()
    # existing directory is fine
    assert mkdirp(str(target)) == target


def test_mkdirp_propagates_errors(tmp_path) -> None:
    """A file in the way is an error the caller has to handle."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(OSError):
        mkdirp(blocker / "child")


@pytest.fixture
def clean_benchplot_logger():
    logger = logging.getLogger("benchplot")
    saved_handlers, saved_level = logger.handlers[:], logger.level
    yield logger
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


def test_configure_logging_only_touches_benchplot(clean_benchplot_logger) -> None:
    root_handlers = logging.getLogger().handlers[:]
    configure_logging(level="DEBUG", force=True)

    assert clean_benchplot_logger.level == logging.DEBUG
    assert logging.getLogger().handlers == root_handlers
    stderr_handlers = [
        h for h in clean_benchplot_logger.handlers
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr
    ]
    assert len(stderr_handlers) == 1

    # a second call without force keeps the existing handler
    configure_logging(level="INFO")
    assert len(clean_benchplot_logger.handlers) == 1


def test_configure_logging_tags_records_with_pid(clean_benchplot_logger) -> None:
    """Worker and parent records share stderr, so each line names its process."""
    configure_logging(level="INFO", force=True)
    configure_logging(level="DEBUG")

    (handler,) = clean_benchplot_logger.handlers
    assert handler.level == logging.DEBUG
    record = logging.LogRecord("benchplot.plot.render", logging.INFO, __file__, 1, "started", None, None)
    assert f"pid={os.getpid()}" in handler.format(record)


def test_configure_logging_env_level(clean_benchplot_logger, monkeypatch) -> None:
    monkeypatch.setenv("BENCHPLOT_LOG_LEVEL", "warning")
    configure_logging(force=True)
    assert clean_benchplot_logger.level == logging.WARNING


def test_get_logger_names() -> None:
    assert get_logger().name == "benchplot"
    assert get_logger("benchplot.plot.render").name == "benchplot.plot.render"
