"""Split a labeled sample into clean, mild and severe point series."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from benchplot.stats.sample import Fences, LabeledSample


@dataclass(frozen=True)
class PointSeries:
    x: np.ndarray
    y: np.ndarray

    def __len__(self) -> int:
        return len(self.x)


@dataclass(frozen=True)
class OutlierPartition:
    """Every observation lands in exactly one of clean, mild or severe."""
    clean: PointSeries
    mild: PointSeries
    severe: PointSeries
    fences: Fences


def partition_outliers(labeled: LabeledSample, aux: Sequence[float]) -> OutlierPartition:
    """Partition ``labeled`` by label, pairing each value with ``aux[i]``.

    Args:
        labeled: Observations with their outlier labels (x values).
        aux: Values indexed like ``labeled`` (y values, e.g. iteration counts).

    Returns:
        OutlierPartition with original ordering preserved in each series.
    """
    x = np.asarray(labeled.values, dtype=float)
    y = np.asarray(aux, dtype=float)
    if len(x) != len(y):
        raise ValueError(f"aux has {len(y)} values, sample has {len(x)}")

    mild = np.array([label.is_mild for label in labeled.labels], dtype=bool)
    severe = np.array([label.is_severe for label in labeled.labels], dtype=bool)
    clean = ~(mild | severe)

    return OutlierPartition(
        clean=PointSeries(x[clean], y[clean]),
        mild=PointSeries(x[mild], y[mild]),
        severe=PointSeries(x[severe], y[severe]),
        fences=labeled.fences,
    )
