# tests/conftest.py
"""Shared fixtures: synthetic benchmark results and Plotly array decoding."""

from __future__ import annotations

import base64
import json
import sys
from pathlib import Path
from typing import Any, Optional

import numpy as np
import pytest


def pytest_configure() -> None:
    # Ensure benchplot is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


# -----------------------------------------------------------------------------
# Plotly binary decode (fig.to_dict may use bdata/dtype instead of plain lists)
# -----------------------------------------------------------------------------

def decode_plotly_array(obj: Any) -> np.ndarray:
    """Decode plotly binary serialization (dtype + bdata) if present."""
    if isinstance(obj, dict) and "bdata" in obj and "dtype" in obj:
        b = base64.b64decode(obj["bdata"])
        dtype = np.dtype(obj["dtype"])
        return np.frombuffer(b, dtype=dtype).copy()
    return np.asarray(obj, dtype=float)


@pytest.fixture
def decode():
    return decode_plotly_array


# -----------------------------------------------------------------------------
# Synthetic benchmark data
# -----------------------------------------------------------------------------

def estimate_dict(point: float, lower: float, upper: float) -> dict[str, Any]:
    """estimates.json entry for one statistic."""
    return {
        "confidence_interval": {"confidence_level": 0.95, "lower_bound": lower, "upper_bound": upper},
        "point_estimate": point,
        "standard_error": (upper - lower) / 4,
    }


def estimates_json(ns: float, spread: float = 0.05) -> dict[str, Any]:
    """Estimates for a benchmark whose iterations take about ``ns`` nanoseconds."""
    lo, hi = ns * (1 - spread), ns * (1 + spread)
    return {
        "Mean": estimate_dict(ns, lo, hi),
        "Median": estimate_dict(ns, lo, hi),
        "MedianAbsDev": estimate_dict(ns * 0.1, ns * 0.08, ns * 0.12),
        "Slope": estimate_dict(ns, lo, hi),
        "StdDev": estimate_dict(ns * 0.2, ns * 0.15, ns * 0.25),
    }


def linear_sample(ns: float, n: int = 30, seed: int = 0) -> tuple[list[float], list[float]]:
    """Linear sampling: iteration counts d, 2d, ..., total times ~ ns per iteration."""
    rng = np.random.default_rng(seed)
    iters = [float(10 * (i + 1)) for i in range(n)]
    times = [it * ns * (1 + 0.02 * rng.standard_normal()) for it in iters]
    return iters, times


def write_bench(
    group_dir: Path,
    name: str,
    generation: str,
    ns: float,
    *,
    estimates: Optional[dict[str, Any]] = None,
    sample: Optional[Any] = None,
) -> Path:
    """Create ``{group_dir}/{name}/{generation}`` with estimates.json and sample.json."""
    root = group_dir / name / generation
    root.mkdir(parents=True, exist_ok=True)
    (root / "estimates.json").write_text(json.dumps(estimates or estimates_json(ns)), encoding="utf-8")
    (root / "sample.json").write_text(json.dumps(sample or list(linear_sample(ns))), encoding="utf-8")
    return root


class FakeHandle:
    def __init__(self, output_path: Path, status: int = 0) -> None:
        self.output_path = output_path
        self.status = status
        self.waited = False

    def wait(self, timeout=None) -> int:
        self.waited = True
        return self.status


class FakeRenderer:
    """Records every spec instead of launching a process.

    With ``fail_on=n`` the n-th launch (1-based) raises RenderLaunchError.
    """

    def __init__(self, fail_on: Optional[int] = None) -> None:
        self.specs = []
        self.handles = []
        self.fail_on = fail_on

    def render(self, spec):
        from benchplot.plot.errors import RenderLaunchError

        if self.fail_on is not None and len(self.specs) + 1 == self.fail_on:
            raise RenderLaunchError(f"Cannot launch renderer for {spec.output_path}")
        self.specs.append(spec)
        handle = FakeHandle(spec.output_path)
        self.handles.append(handle)
        return handle

    @property
    def paths(self) -> list[Path]:
        return [spec.output_path for spec in self.specs]


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)
