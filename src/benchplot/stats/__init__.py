"""Data model for benchmark statistics: estimates, samples and density estimates."""

from .estimate import (
    ConfidenceInterval,
    Distributions,
    Estimate,
    Estimates,
    Statistic,
    load_estimates,
)
from .sample import Fences, Label, LabeledSample, Measurements, load_measurements

__all__ = [
    "ConfidenceInterval",
    "Distributions",
    "Estimate",
    "Estimates",
    "Fences",
    "Label",
    "LabeledSample",
    "Measurements",
    "Statistic",
    "load_estimates",
    "load_measurements",
]
