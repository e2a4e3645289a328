"""Raw benchmark samples: paired measurements and outlier-labeled samples."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence

import numpy as np

from benchplot.utils.fs import load_json
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)


class Label(Enum):
    """Outlier classification of a single observation."""
    CLEAN = "clean"
    LOW_MILD = "low_mild"
    HIGH_MILD = "high_mild"
    LOW_SEVERE = "low_severe"
    HIGH_SEVERE = "high_severe"

    @property
    def is_outlier(self) -> bool:
        return self is not Label.CLEAN

    @property
    def is_mild(self) -> bool:
        return self in (Label.LOW_MILD, Label.HIGH_MILD)

    @property
    def is_severe(self) -> bool:
        return self in (Label.LOW_SEVERE, Label.HIGH_SEVERE)


@dataclass(frozen=True)
class Fences:
    """Outlier thresholds, ordered low_severe <= low_mild <= high_mild <= high_severe."""
    low_severe: float
    low_mild: float
    high_mild: float
    high_severe: float

    def __post_init__(self) -> None:
        if not self.low_severe <= self.low_mild <= self.high_mild <= self.high_severe:
            raise ValueError(f"Fences are not monotonically ordered: {self}")

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.low_severe, self.low_mild, self.high_mild, self.high_severe


@dataclass(frozen=True)
class LabeledSample:
    """A sample in which every observation carries an outlier label.

    Attributes:
        values: Observations, in measurement order.
        labels: One Label per observation.
        fences: Thresholds the labels were derived from.
    """
    values: np.ndarray
    labels: tuple[Label, ...]
    fences: Fences

    def __post_init__(self) -> None:
        if len(self.values) != len(self.labels):
            raise ValueError(
                f"LabeledSample needs one label per value: {len(self.values)} values, {len(self.labels)} labels"
            )

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[tuple[float, Label]]:
        return zip(self.values.tolist(), self.labels)

    def mean(self) -> float:
        return float(np.mean(self.values))

    def max(self) -> float:
        return float(np.max(self.values))

    def min(self) -> float:
        return float(np.min(self.values))

    @classmethod
    def tukey(cls, values: Sequence[float]) -> "LabeledSample":
        """Label a sample with Tukey's fences (1.5 and 3 interquartile ranges)."""
        arr = np.asarray(values, dtype=float)
        q1, q3 = np.percentile(arr, [25, 75])
        iqr = q3 - q1
        fences = Fences(
            low_severe=float(q1 - 3 * iqr),
            low_mild=float(q1 - 1.5 * iqr),
            high_mild=float(q3 + 1.5 * iqr),
            high_severe=float(q3 + 3 * iqr),
        )
        labels = []
        for x in arr:
            if x < fences.low_severe:
                labels.append(Label.LOW_SEVERE)
            elif x > fences.high_severe:
                labels.append(Label.HIGH_SEVERE)
            elif x < fences.low_mild:
                labels.append(Label.LOW_MILD)
            elif x > fences.high_mild:
                labels.append(Label.HIGH_MILD)
            else:
                labels.append(Label.CLEAN)
        return cls(values=arr, labels=tuple(labels), fences=fences)


@dataclass(frozen=True)
class Measurements:
    """Paired iteration counts and total elapsed times (nanoseconds)."""
    iters: np.ndarray
    times: np.ndarray

    def __post_init__(self) -> None:
        if self.iters.shape != self.times.shape or self.iters.ndim != 1:
            raise ValueError(
                f"iters and times must be 1-D and the same length: {self.iters.shape} vs {self.times.shape}"
            )
        if len(self.iters) == 0:
            raise ValueError("Measurements must not be empty")
        if np.any(self.iters <= 0):
            raise ValueError("Iteration counts must be positive")

    @classmethod
    def from_lists(cls, iters: Sequence[float], times: Sequence[float]) -> "Measurements":
        return cls(iters=np.asarray(iters, dtype=float), times=np.asarray(times, dtype=float))

    def avg_times(self) -> np.ndarray:
        """Per-iteration time of every measurement."""
        return self.times / self.iters


def load_measurements(path) -> Optional[Measurements]:
    """Load a ``sample.json`` file (``[[iters...], [times...]]``), None on failure."""
    raw = load_json(path)
    try:
        iters, times = raw
        return Measurements.from_lists(iters, times)
    except (TypeError, ValueError) as e:
        logger.debug(f"Malformed sample in {path}: {e}")
        return None
