"""
Gaussian kernel density estimation, pure numpy.

Bandwidth follows Silverman's rule of thumb:

    h = (4/3)^(1/5) * sd * n^(-1/5)

with the sample standard deviation using an n-1 denominator. A sweep evaluates
the density on ``npoints`` evenly spaced points; by default the window extends
three bandwidths beyond the sample extremes.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

# Sample points per chunk when evaluating the density; bounds the
# temporary (npoints x chunk) matrix for large bootstrap distributions.
_CHUNK = 4096

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def silverman_bandwidth(sample: np.ndarray) -> float:
    n = len(sample)
    sd = float(np.std(sample, ddof=1)) if n > 1 else 0.0
    h = (4.0 / 3.0) ** 0.2 * sd * n ** -0.2
    if h > 0:
        return h
    # Constant sample: fall back to a tiny bandwidth relative to its magnitude.
    return max(abs(float(sample[0])), 1.0) * np.finfo(float).eps * 1e3


def evaluate(sample: np.ndarray, xs: np.ndarray, bandwidth: float) -> np.ndarray:
    """Density of ``sample`` at every point of ``xs``."""
    xs = np.asarray(xs, dtype=float)
    ys = np.zeros(len(xs), dtype=float)
    for start in range(0, len(sample), _CHUNK):
        chunk = sample[start:start + _CHUNK]
        u = (xs[:, None] - chunk[None, :]) / bandwidth
        ys += np.exp(-0.5 * u * u).sum(axis=1)
    return ys * _INV_SQRT_2PI / (bandwidth * len(sample))


def sweep(
    sample: Sequence[float],
    npoints: int,
    window: Optional[tuple[float, float]] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Evaluate the KDE of ``sample`` over a window.

    Args:
        sample: Observations (at least one).
        npoints: Number of evaluation points.
        window: Optional (start, end); defaults to three bandwidths beyond min/max.

    Returns:
        (xs, ys), both of length ``npoints``, xs ascending.
    """
    xs, ys, _ = sweep_and_estimate(sample, npoints, window, None)
    return xs, ys


def sweep_and_estimate(
    sample: Sequence[float],
    npoints: int,
    window: Optional[tuple[float, float]],
    point: Optional[float],
) -> tuple[np.ndarray, np.ndarray, Optional[float]]:
    """Like sweep(), also returning the density at ``point`` (None if no point given)."""
    arr = np.asarray(sample, dtype=float)
    if arr.ndim != 1 or len(arr) == 0:
        raise ValueError("KDE needs a non-empty 1-D sample")
    h = silverman_bandwidth(arr)
    if window is None:
        start, end = float(arr.min()) - 3 * h, float(arr.max()) + 3 * h
    else:
        start, end = window
    xs = np.linspace(start, end, npoints)
    ys = evaluate(arr, xs, h)
    y_point = None if point is None else float(evaluate(arr, np.array([point]), h)[0])
    return xs, ys, y_point
