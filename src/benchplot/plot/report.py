"""Charts for a single benchmark.

plot_measurements() covers one result generation of a benchmark
(``{output}/{id}/{generation}``); plot_comparison() covers the change between
the new and base generations (``{output}/{id}/change``). Both return the
in-flight renders for the caller to join.
"""

from __future__ import annotations

import os
from pathlib import Path

from benchplot.plot.chart_generator import ChartGenerator
from benchplot.plot.render import PendingRenders, Renderer, launch_all
from benchplot.stats.estimate import Distributions, Estimates, Statistic
from benchplot.stats.sample import LabeledSample, Measurements
from benchplot.utils.fs import mkdirp
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)


def plot_measurements(
    bench_id: str,
    output_directory: str | os.PathLike,
    *,
    measurements: Measurements,
    labeled_sample: LabeledSample,
    estimates: Estimates,
    distributions: Distributions,
    generator: ChartGenerator,
    renderer: Renderer,
    generation: str = "new",
) -> PendingRenders:
    """Density, regression and bootstrap distribution charts for one generation.

    Raises:
        OSError: If the output directory cannot be created.
        RenderLaunchError: If a render process cannot be started; renders
            already started are joined and attached as ``error.pending``.
    """
    out_dir = mkdirp(Path(output_directory) / bench_id / generation)
    slope = estimates[Statistic.SLOPE]
    thumbnail = generator.style.thumbnail_size

    specs = [
        generator.pdf(measurements, labeled_sample, bench_id, out_dir / "pdf.svg"),
        generator.pdf_small(labeled_sample.values, out_dir / "pdf_small.svg", size=thumbnail),
        generator.regression(
            measurements, slope.point_estimate, slope.bounds, bench_id, out_dir / "regression.svg",
        ),
        generator.regression(
            measurements, slope.point_estimate, slope.bounds, bench_id, out_dir / "regression_small.svg",
            size=thumbnail, thumbnail_mode=True,
        ),
    ]
    specs.extend(generator.abs_distributions(
        distributions, estimates, bench_id, output_directory, generation=generation,
    ))

    logger.debug(f"{bench_id} ({generation}): rendering {len(specs)} charts")
    return launch_all(renderer, specs)


def plot_comparison(
    bench_id: str,
    output_directory: str | os.PathLike,
    *,
    distributions: Distributions,
    estimates: Estimates,
    noise_threshold: float,
    t_value: float,
    t_distribution,
    generator: ChartGenerator,
    renderer: Renderer,
) -> PendingRenders:
    """Relative-change distributions and the Welch t test chart.

    Args:
        distributions: Bootstrap distributions of the relative change per statistic.
        estimates: Estimates of the relative change per statistic.
        noise_threshold: Changes within +/- this ratio are considered noise.
        t_value: Observed Welch t statistic.
        t_distribution: Bootstrapped t statistics under the null hypothesis.

    Raises:
        OSError: If the output directory cannot be created.
        RenderLaunchError: If a render process cannot be started; renders
            already started are joined and attached as ``error.pending``.
    """
    mkdirp(Path(output_directory) / bench_id / "change")

    specs = generator.rel_distributions(distributions, estimates, bench_id, output_directory, noise_threshold)
    specs.append(generator.t_test(t_value, t_distribution, bench_id, output_directory))

    logger.debug(f"{bench_id} (change): rendering {len(specs)} charts")
    return launch_all(renderer, specs)
