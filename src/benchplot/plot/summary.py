"""
Group summaries: compare sibling benchmarks that share a group id.

For each result generation ("new", then "base") the summary:

  1. Loads every benchmark directory under the group (skipping "summary" and
     anything that fails to load).
  2. Skips the generation when fewer than two benchmarks remain.
  3. Creates ``{group}/summary/{generation}``.
  4. Chooses a mode for the whole group:
       - numeric: every label parses as a non-negative number; benchmarks are
         sorted by that number and plotted as error bars against it.
       - categorical: benchmarks are ranked by each statistic and plotted as
         horizontal error bars with times relative to the fastest, followed
         by a violin plot in median order.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from benchplot.plot.chart_generator import ChartGenerator
from benchplot.plot.chart_spec import ChartSpec
from benchplot.plot.render import PendingRenders, Renderer, launch_all
from benchplot.stats.estimate import Estimates, Statistic, load_estimates
from benchplot.stats.sample import load_measurements
from benchplot.utils.fs import mkdirp
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)

SUMMARY_DIR = "summary"
GENERATIONS = ("new", "base")

NUMERIC_STATISTICS = (Statistic.MEAN, Statistic.MEDIAN, Statistic.SLOPE)
# Median goes last: its ranking is the one shown in the violin plot.
CATEGORICAL_STATISTICS = (Statistic.MEAN, Statistic.SLOPE, Statistic.MEDIAN)

REQUIRED_STATISTICS = frozenset(NUMERIC_STATISTICS)


class SummaryMode(Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class BenchEntry:
    """One benchmark's results as seen by the summary.

    Attributes:
        label: Benchmark directory name.
        parsed_input: Label as a non-negative number, or None.
        estimates: Bootstrap estimates for at least mean, median and slope.
        avg_times: Per-iteration time of every measurement.
    """
    label: str
    parsed_input: Optional[float]
    estimates: Estimates
    avg_times: np.ndarray


def parse_input(label: str) -> Optional[float]:
    """Return ``label`` as a finite non-negative number, or None."""
    try:
        value = float(label)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def load_entry(bench_dir: str | os.PathLike, generation: str) -> Optional[BenchEntry]:
    """Load ``{bench_dir}/{generation}``; None if anything is missing or malformed."""
    bench_dir = Path(bench_dir)
    root = bench_dir / generation

    estimates = load_estimates(root / "estimates.json")
    if estimates is None:
        return None
    missing = REQUIRED_STATISTICS - estimates.keys()
    if missing:
        logger.debug(f"{root}: estimates lack {sorted(s.value for s in missing)}, skipping")
        return None
    measurements = load_measurements(root / "sample.json")
    if measurements is None:
        return None

    return BenchEntry(
        label=bench_dir.name,
        parsed_input=parse_input(bench_dir.name),
        estimates=estimates,
        avg_times=measurements.avg_times(),
    )


def load_entries(group_dir: str | os.PathLike, generation: str) -> list[BenchEntry]:
    """Load every benchmark under ``group_dir`` for one generation, in name order."""
    group_dir = Path(group_dir)
    if not group_dir.is_dir():
        return []
    entries = []
    for child in sorted(group_dir.iterdir()):
        if not child.is_dir() or child.name == SUMMARY_DIR:
            continue
        entry = load_entry(child, generation)
        if entry is None:
            logger.debug(f"Skipping {child} ({generation}): no usable results")
            continue
        entries.append(entry)
    return entries


def select_mode(entries: Sequence[BenchEntry]) -> SummaryMode:
    """Numeric only if every label is a number; one non-number makes the group categorical."""
    if all(e.parsed_input is not None for e in entries):
        return SummaryMode.NUMERIC
    return SummaryMode.CATEGORICAL


def sort_by_input(entries: Sequence[BenchEntry]) -> list[BenchEntry]:
    return sorted(entries, key=lambda e: e.parsed_input)


def rank_by(entries: Sequence[BenchEntry], statistic: Statistic) -> list[BenchEntry]:
    """Sort descending by the statistic's point estimate (stable for ties)."""
    return sorted(entries, key=lambda e: e.estimates[statistic].point_estimate, reverse=True)


def relative_ratios(points: Sequence[float]) -> list[str]:
    """Each point relative to the smallest, formatted with two decimals.

    A zero smallest point gives "inf" for positive points and "nan" for zero ones.
    """
    smallest = min(points)
    ratios = []
    for p in points:
        if smallest == 0:
            ratio = math.inf if p > 0 else math.nan
        else:
            ratio = p / smallest
        ratios.append(f"{ratio:.2f}")
    return ratios


def estimate_table(
    entries: Sequence[BenchEntry],
    statistic: Statistic,
    *,
    relative: bool = False,
) -> pd.DataFrame:
    """One row per entry (in the given order) with the statistic's estimate.

    With ``relative=True`` a "relative" column holds each point divided by the
    smallest one (see relative_ratios).
    """
    estimates = [e.estimates[statistic] for e in entries]
    points = [est.point_estimate for est in estimates]
    table = pd.DataFrame({
        "label": [e.label for e in entries],
        "input": [e.parsed_input for e in entries],
        "point": points,
        "lower": [est.confidence_interval.lower_bound for est in estimates],
        "upper": [est.confidence_interval.upper_bound for est in estimates],
    })
    if relative:
        table["relative"] = relative_ratios(points)
    return table


def numeric_summary_specs(
    group_id: str,
    entries: Sequence[BenchEntry],
    summary_dir: Path,
    generator: ChartGenerator,
) -> list[ChartSpec]:
    ordered = sort_by_input(entries)
    return [
        generator.summary_inputs(
            group_id, statistic, estimate_table(ordered, statistic), summary_dir / f"{statistic}s.svg"
        )
        for statistic in NUMERIC_STATISTICS
    ]


def categorical_summary_specs(
    group_id: str,
    entries: Sequence[BenchEntry],
    summary_dir: Path,
    generator: ChartGenerator,
) -> tuple[list[ChartSpec], list[BenchEntry]]:
    """Ranking charts for every statistic plus the violin plot.

    Returns:
        (specs, final_order): final_order is the median ranking used by the violin plot.
    """
    specs = []
    for statistic in CATEGORICAL_STATISTICS:
        ranked = rank_by(entries, statistic)
        specs.append(generator.summary_ranking(
            group_id, statistic, estimate_table(ranked, statistic, relative=True), summary_dir / f"{statistic}s.svg"
        ))

    final_order = rank_by(entries, Statistic.MEDIAN)
    specs.append(generator.violin(
        group_id,
        {e.label: e.avg_times for e in final_order},
        summary_dir / "violin_plot.svg",
    ))
    return specs, final_order


def summary_specs(
    group_id: str,
    entries: Sequence[BenchEntry],
    summary_dir: Path,
    generator: ChartGenerator,
) -> list[ChartSpec]:
    """All summary charts for one generation (pure; does not touch the filesystem)."""
    mode = select_mode(entries)
    logger.info(f"Summary {group_id}: {len(entries)} benchmarks, {mode.value} mode")
    if mode is SummaryMode.NUMERIC:
        return numeric_summary_specs(group_id, entries, summary_dir, generator)
    specs, _ = categorical_summary_specs(group_id, entries, summary_dir, generator)
    return specs


def summarize(
    group_id: str,
    output_directory: str | os.PathLike,
    *,
    generator: ChartGenerator,
    renderer: Renderer,
) -> PendingRenders:
    """Render the summary charts of a group for every generation.

    Returns the still-running renders; the caller must join them.

    Raises:
        RenderLaunchError: If a render process cannot be started. Renders
            already started for either generation are joined first and
            attached as ``error.pending``.
    """
    group_dir = Path(output_directory) / group_id
    pending = PendingRenders()

    for generation in GENERATIONS:
        entries = load_entries(group_dir, generation)
        if len(entries) < 2:
            logger.debug(f"Summary {group_id} ({generation}): {len(entries)} usable benchmarks, skipping")
            continue

        summary_dir = group_dir / SUMMARY_DIR / generation
        try:
            mkdirp(summary_dir)
        except OSError as e:
            logger.error(f"Cannot create {summary_dir}: {e}; no {generation} summary for {group_id}")
            continue

        launch_all(renderer, summary_specs(group_id, entries, summary_dir, generator), pending)

    return pending
