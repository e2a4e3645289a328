"""Bootstrap estimates and distributions consumed by the chart assemblers.

Estimates arrive precomputed from the statistics engine, typically as an
``estimates.json`` file shaped like::

    {
        "Mean": {
            "confidence_interval": {"confidence_level": 0.95, "lower_bound": 9.8, "upper_bound": 10.3},
            "point_estimate": 10.0,
            "standard_error": 0.12
        },
        ...
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import numpy as np

from benchplot.utils.fs import load_json
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)


class Statistic(Enum):
    """Statistics reported for every benchmark."""
    MEAN = "Mean"
    MEDIAN = "Median"
    MEDIAN_ABS_DEV = "MedianAbsDev"
    SLOPE = "Slope"
    STD_DEV = "StdDev"

    @property
    def display_name(self) -> str:
        """Short name used in file names, titles and legend entries."""
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    Statistic.MEAN: "mean",
    Statistic.MEDIAN: "median",
    Statistic.MEDIAN_ABS_DEV: "MAD",
    Statistic.SLOPE: "slope",
    Statistic.STD_DEV: "SD",
}


@dataclass(frozen=True)
class ConfidenceInterval:
    lower_bound: float
    upper_bound: float
    confidence_level: float = 0.95


@dataclass(frozen=True)
class Estimate:
    """A point estimate bracketed by its confidence interval."""
    point_estimate: float
    confidence_interval: ConfidenceInterval
    standard_error: Optional[float] = None

    def __post_init__(self) -> None:
        ci = self.confidence_interval
        if not ci.lower_bound <= self.point_estimate <= ci.upper_bound:
            raise ValueError(
                f"Estimate {self.point_estimate} is not bracketed by its confidence interval "
                f"[{ci.lower_bound}, {ci.upper_bound}]"
            )

    @property
    def bounds(self) -> tuple[float, float]:
        return self.confidence_interval.lower_bound, self.confidence_interval.upper_bound

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Estimate":
        """Deserialize one estimate.

        Raises:
            KeyError, TypeError, ValueError: If the payload is malformed.
        """
        ci = data["confidence_interval"]
        se = data.get("standard_error")
        return cls(
            point_estimate=float(data["point_estimate"]),
            confidence_interval=ConfidenceInterval(
                lower_bound=float(ci["lower_bound"]),
                upper_bound=float(ci["upper_bound"]),
                confidence_level=float(ci.get("confidence_level", 0.95)),
            ),
            standard_error=None if se is None else float(se),
        )


Estimates = Dict[Statistic, Estimate]
Distributions = Dict[Statistic, np.ndarray]


def estimates_from_json_dict(data: Mapping[str, Any]) -> Estimates:
    """Build an Estimates mapping, ignoring keys that are not known statistics.

    Raises:
        KeyError, TypeError, ValueError: If a known statistic has a malformed entry.
    """
    result: Estimates = {}
    for key, value in data.items():
        try:
            statistic = Statistic(key)
        except ValueError:
            logger.warning(f"Unknown statistic '{key}' in estimates, ignoring")
            continue
        result[statistic] = Estimate.from_dict(value)
    return result


def load_estimates(path) -> Optional[Estimates]:
    """Load an ``estimates.json`` file, returning None if it is missing or malformed."""
    raw = load_json(path)
    if not isinstance(raw, dict):
        return None
    try:
        return estimates_from_json_dict(raw)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug(f"Malformed estimates in {path}: {e}")
        return None
