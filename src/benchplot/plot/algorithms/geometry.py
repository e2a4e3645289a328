"""
Curve and marker geometry, pure numpy.

Curves are sampled KDE sweeps: ``xs`` ascending, ``ys`` the density at each
``xs``. The helpers here derive everything a chart draws on top of a curve:

  1. The curve height at an arbitrary x (point estimate markers).
  2. The index span covered by a confidence interval (shaded area).
  3. Vertical marker segments.
  4. The noise-threshold band clipped to the curve domain.
  5. Peak normalization for violin shapes.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from benchplot.plot.errors import DegenerateCurveError, EmptyWindowError, OutOfDomainError


def interpolate_height(xs: Sequence[float], ys: Sequence[float], p: float) -> float:
    """Linearly interpolate the curve height at ``p``.

    Exact grid hits return the sampled height unchanged.

    Raises:
        DegenerateCurveError: If ``xs`` is not strictly increasing.
        OutOfDomainError: If ``p`` lies outside ``[xs[0], xs[-1]]``.
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if len(xs) > 1 and np.any(np.diff(xs) <= 0):
        raise DegenerateCurveError("Curve x samples must be strictly increasing")
    if len(xs) == 0 or not xs[0] <= p <= xs[-1]:
        raise OutOfDomainError(f"{p} is outside the curve domain")
    i = int(np.searchsorted(xs, p, side="left"))  # smallest i with xs[i] >= p
    if xs[i] == p:
        return float(ys[i])
    x0, x1 = xs[i - 1], xs[i]
    return float(ys[i - 1] + (ys[i] - ys[i - 1]) / (x1 - x0) * (p - x0))


def window_span(xs: Sequence[float], lb: float, ub: float) -> tuple[int, int]:
    """Inclusive index span ``[start, end]`` of the samples inside ``[lb, ub]``.

    ``start`` is the first index with ``xs[i] >= lb`` and ``end`` the last one
    with ``xs[i] <= ub``. A window narrower than one grid step yields the two
    samples bracketing it.

    Raises:
        EmptyWindowError: If no sample satisfies one of the bounds.
    """
    xs = np.asarray(xs, dtype=float)
    above = np.flatnonzero(xs >= lb)
    below = np.flatnonzero(xs <= ub)
    if len(above) == 0 or len(below) == 0:
        raise EmptyWindowError(f"Window [{lb}, {ub}] does not overlap the curve")
    start, end = int(above[0]), int(below[-1])
    if start > end:
        start, end = end, start
    return start, end


def marker_line(x: float, height: float) -> tuple[list[float], list[float]]:
    """Vertical segment from zero to ``height`` at ``x``, as (xs, ys)."""
    return [x, x], [0.0, height]


def noise_band(x_min: float, x_max: float, threshold: float) -> tuple[float, float]:
    """Intersect ``[-threshold, threshold]`` with the curve domain.

    When the threshold lies entirely outside the domain the band collapses
    to zero width at the domain midpoint.
    """
    if threshold < x_min or -threshold > x_max:
        middle = (x_min + x_max) / 2
        return middle, middle
    return max(-threshold, x_min), min(threshold, x_max)


def normalize_peak(ys: Sequence[float]) -> np.ndarray:
    """Scale a curve so its maximum is 1."""
    ys = np.asarray(ys, dtype=float)
    peak = float(ys.max())
    if peak <= 0:
        return np.zeros_like(ys)
    return ys / peak
