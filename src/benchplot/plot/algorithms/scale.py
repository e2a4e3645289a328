"""Display unit selection for time and iteration-count axes."""

from __future__ import annotations

import math


def resolve_time_scale(max_ns: float) -> tuple[float, str]:
    """Pick a display unit for times up to ``max_ns`` nanoseconds.

    Returns:
        (factor, unit_prefix): multiply nanoseconds by ``factor`` to get
        ``{unit_prefix}s``. Intervals are half-open, so 1e3 ns is shown in "u"s.
    """
    if max_ns < 1e0:
        return 1e3, "p"
    if max_ns < 1e3:
        return 1e0, "n"
    if max_ns < 1e6:
        return 1e-3, "u"
    if max_ns < 1e9:
        return 1e-6, "m"
    return 1e-9, ""


def count_exponent(max_iters: float) -> int:
    """Largest multiple of three not exceeding log10(max_iters)."""
    if not max_iters > 0:
        raise ValueError(f"Iteration count must be positive, got {max_iters}")
    return math.floor(math.log10(max_iters) / 3) * 3


def resolve_count_scale(max_iters: float) -> tuple[float, str]:
    """Pick a display scale for iteration counts up to ``max_iters``.

    Returns:
        (factor, axis_label), e.g. (1e-3, "Iterations (x 10^3)").

    Raises:
        ValueError: If ``max_iters`` is not positive.
    """
    exponent = count_exponent(max_iters)
    factor = 10.0 ** -exponent
    if exponent == 0:
        return factor, "Iterations"
    return factor, f"Iterations (x 10^{exponent})"
