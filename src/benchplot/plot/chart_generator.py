"""Plotly chart assembly for benchmark reports.

This module provides the ChartGenerator class, which turns measurements,
labeled samples, bootstrap distributions and estimates into ChartSpec values
(Plotly figure dictionaries plus output path and size). Nothing here touches
the filesystem or launches processes; see benchplot.plot.render for that.

Plotly axes have no scale factor, so every time or iteration value is
multiplied by the factor from benchplot.plot.algorithms.scale before it is
placed in a trace. Axis titles carry the chosen unit.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.colors import hex_to_rgb, unlabel_rgb

from benchplot.plot.algorithms.geometry import (
    interpolate_height,
    marker_line,
    noise_band,
    normalize_peak,
    window_span,
)
from benchplot.plot.algorithms.outliers import partition_outliers
from benchplot.plot.algorithms.scale import resolve_count_scale, resolve_time_scale
from benchplot.plot.chart_spec import ChartSpec
from benchplot.plot.chart_style import ChartStyle
from benchplot.stats import kde
from benchplot.stats.estimate import Distributions, Estimate, Estimates, Statistic
from benchplot.stats.sample import LabeledSample, Measurements
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)

# Legend placed to the right of the plotting area.
LEGEND_OUTSIDE = dict(x=1.08, y=1.0, xanchor="left", yanchor="top", traceorder="normal")
LEGEND_INSIDE = dict(x=0.01, y=0.99, xanchor="left", yanchor="top", traceorder="normal")

# Breathing room around a confidence interval when sweeping a bootstrap KDE.
CI_PADDING_DIVISOR = 9.0


def _with_alpha(color: str, alpha: float) -> str:
    """Convert an ``rgb(...)`` or ``#rrggbb`` color to ``rgba(...)``."""
    if color.startswith("#"):
        r, g, b = hex_to_rgb(color)
    else:
        r, g, b = unlabel_rgb(color)
    return f"rgba({int(r)}, {int(g)}, {int(b)}, {alpha})"


def _tics(n: int) -> list[float]:
    """Ordinal row centers 0.5, 1.5, ... for ``n`` rows."""
    return [i + 0.5 for i in range(n)]


class ChartGenerator:
    """Builds ChartSpec values for every chart kind.

    Each public method is a pure function of its arguments and the
    ChartStyle passed at construction: calling it twice with the same inputs
    yields equal specs.

    Attributes:
        style: Fonts, sizes, colors and KDE resolution shared by all charts.
    """

    def __init__(self, style: Optional[ChartStyle] = None) -> None:
        self.style = style if style is not None else ChartStyle()

    # -----------------------------
    # Shared pieces
    # -----------------------------
    def _layout(self, *, title: Optional[str], show_legend: bool = True, legend: Optional[dict] = None) -> dict:
        layout = dict(
            font=dict(family=self.style.font),
            showlegend=show_legend,
            margin=dict(l=80, r=40, t=60 if title else 30, b=60),
        )
        if title:
            layout["title"] = dict(text=title)
        if show_legend:
            layout["legend"] = legend or LEGEND_OUTSIDE
        return layout

    def _fill(self, color: str, alpha: Optional[float] = None) -> str:
        return _with_alpha(color, self.style.fill_opacity if alpha is None else alpha)

    def _spec(self, fig: go.Figure, path: str | os.PathLike, size: Optional[tuple[int, int]]) -> ChartSpec:
        width, height = size or self.style.size
        spec = ChartSpec(figure=fig.to_dict(), output_path=Path(path), width=int(width), height=int(height))
        logger.debug(f"Chart built: {spec.output_path} ({len(spec.figure.get('data', []))} traces)")
        return spec

    def _bootstrap_curve(self, distribution: Sequence[float], estimate: Estimate):
        """Sweep a bootstrap distribution around its confidence interval.

        Returns (xs, ys, point, point_height, start, end) where [start, end] is
        the inclusive index span of the confidence interval.
        """
        lb, ub = estimate.bounds
        pad = (ub - lb) / CI_PADDING_DIVISOR
        xs, ys = kde.sweep(distribution, self.style.kde_points, (lb - pad, ub + pad))
        p = estimate.point_estimate
        y_p = interpolate_height(xs, ys, p)
        start, end = window_span(xs, lb, ub)
        return xs, ys, p, y_p, start, end

    def _bootstrap_traces(self, fig: go.Figure, xs, ys, p, y_p, start, end, x_scale: float, y_scale: float) -> None:
        """Full curve, shaded confidence interval and point-estimate marker."""
        style = self.style
        fig.add_trace(go.Scatter(
            x=(xs * x_scale).tolist(),
            y=(ys * y_scale).tolist(),
            mode="lines",
            name="Bootstrap distribution",
            line=dict(color=style.primary_color, width=style.line_width, dash="solid"),
        ))
        fig.add_trace(go.Scatter(
            x=(xs[start:end + 1] * x_scale).tolist(),
            y=(ys[start:end + 1] * y_scale).tolist(),
            mode="lines",
            fill="tozeroy",
            name="Confidence interval",
            line=dict(color=self._fill(style.primary_color), width=0),
            fillcolor=self._fill(style.primary_color),
        ))
        mx, my = marker_line(p * x_scale, y_p * y_scale)
        fig.add_trace(go.Scatter(
            x=mx,
            y=my,
            mode="lines",
            name="Point estimate",
            line=dict(color=style.primary_color, width=style.line_width, dash="dash"),
        ))

    # -----------------------------
    # Per-benchmark charts
    # -----------------------------
    def pdf_small(
        self,
        sample: Sequence[float],
        path: str | os.PathLike,
        *,
        size: Optional[tuple[int, int]] = None,
    ) -> ChartSpec:
        """Density of the per-iteration times with a mean marker, no legend."""
        style = self.style
        values = np.asarray(sample, dtype=float)
        x_scale, prefix = resolve_time_scale(float(values.max()))
        mean = float(values.mean())

        xs, ys, mean_y = kde.sweep_and_estimate(values, style.kde_points, None, mean)
        y_limit = float(ys.max()) * 1.1

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=(xs * x_scale).tolist(),
            y=ys.tolist(),
            mode="lines",
            fill="tozeroy",
            name="PDF",
            line=dict(color=self._fill(style.primary_color), width=0),
            fillcolor=self._fill(style.primary_color),
        ))
        mx, my = marker_line(mean * x_scale, mean_y)
        fig.add_trace(go.Scatter(
            x=mx,
            y=my,
            mode="lines",
            name="Mean",
            line=dict(color=style.primary_color, width=style.line_width),
        ))
        fig.update_layout(
            **self._layout(title=None, show_legend=False),
            xaxis=dict(
                title=dict(text=f"Average time ({prefix}s)"),
                range=[float(xs.min()) * x_scale, float(xs.max()) * x_scale],
            ),
            yaxis=dict(title=dict(text="Density (a.u.)"), range=[0.0, y_limit]),
        )
        return self._spec(fig, path, size or style.thumbnail_size)

    def pdf(
        self,
        measurements: Measurements,
        labeled: LabeledSample,
        bench_id: str,
        path: str | os.PathLike,
        *,
        size: Optional[tuple[int, int]] = None,
    ) -> ChartSpec:
        """Density of per-iteration times overlaid with every measurement and the outlier fences.

        Measurements are plotted at (time, iteration count) and colored by
        their outlier label; the density uses a secondary y axis.
        """
        style = self.style
        x_scale, prefix = resolve_time_scale(labeled.max())
        mean = labeled.mean()

        max_iters = float(measurements.iters.max())
        y_scale, y_label = resolve_count_scale(max_iters)

        xs, ys = kde.sweep(labeled.values, style.kde_points)
        partition = partition_outliers(labeled, measurements.iters)
        vertical = [0.0, max_iters * y_scale]

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=(xs * x_scale).tolist(),
            y=ys.tolist(),
            yaxis="y2",
            mode="lines",
            fill="tozeroy",
            name="PDF",
            line=dict(color=self._fill(style.primary_color), width=0),
            fillcolor=self._fill(style.primary_color),
        ))
        fig.add_trace(go.Scatter(
            x=[mean * x_scale, mean * x_scale],
            y=vertical,
            mode="lines",
            name="Mean",
            line=dict(color=style.primary_color, width=style.line_width, dash="dash"),
        ))
        for name, series, color in (
            ('"Clean" sample', partition.clean, style.primary_color),
            ("Mild outliers", partition.mild, style.mild_color),
            ("Severe outliers", partition.severe, style.severe_color),
        ):
            fig.add_trace(go.Scatter(
                x=(series.x * x_scale).tolist(),
                y=(series.y * y_scale).tolist(),
                mode="markers",
                name=name,
                marker=dict(color=color, size=style.point_size, symbol="circle"),
            ))
        fences = partition.fences
        for fence, color in (
            (fences.low_mild, style.mild_color),
            (fences.high_mild, style.mild_color),
            (fences.low_severe, style.severe_color),
            (fences.high_severe, style.severe_color),
        ):
            fig.add_trace(go.Scatter(
                x=[fence * x_scale, fence * x_scale],
                y=vertical,
                mode="lines",
                showlegend=False,
                hoverinfo="skip",
                line=dict(color=color, width=style.line_width, dash="dash"),
            ))

        fig.update_layout(
            **self._layout(title=bench_id),
            xaxis=dict(
                title=dict(text=f"Average time ({prefix}s)"),
                range=[float(xs.min()) * x_scale, float(xs.max()) * x_scale],
            ),
            yaxis=dict(title=dict(text=y_label), range=vertical),
            yaxis2=dict(
                title=dict(text="Density (a.u.)"),
                overlaying="y",
                side="right",
                rangemode="tozero",
                showgrid=False,
            ),
        )
        return self._spec(fig, path, size)

    def regression(
        self,
        measurements: Measurements,
        point: float,
        bounds: tuple[float, float],
        bench_id: str,
        path: str | os.PathLike,
        *,
        size: Optional[tuple[int, int]] = None,
        thumbnail_mode: bool = False,
    ) -> ChartSpec:
        """Total time vs iteration count with the fitted slope and its confidence band.

        Args:
            measurements: Paired iteration counts and total times.
            point: Slope point estimate (ns per iteration).
            bounds: Slope confidence interval (lower, upper).
            thumbnail_mode: Hide title and legend; geometry is unchanged.
        """
        style = self.style
        max_iters = float(measurements.iters.max())
        max_elapsed = float(measurements.times.max())

        y_scale, prefix = resolve_time_scale(max_elapsed)
        x_scale, x_label = resolve_count_scale(max_iters)

        lb, ub = bounds
        x_end = max_iters * x_scale
        y_point = point * max_iters * y_scale
        y_lb = lb * max_iters * y_scale
        y_ub = ub * max_iters * y_scale

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=(measurements.iters * x_scale).tolist(),
            y=(measurements.times * y_scale).tolist(),
            mode="markers",
            name="Sample",
            marker=dict(color=style.primary_color, size=style.point_size, symbol="circle"),
        ))
        fig.add_trace(go.Scatter(
            x=[0.0, x_end],
            y=[0.0, y_point],
            mode="lines",
            name="Linear regression",
            line=dict(color=style.primary_color, width=style.line_width, dash="solid"),
        ))
        fig.add_trace(go.Scatter(
            x=[0.0, x_end, x_end, 0.0],
            y=[0.0, y_ub, y_lb, 0.0],
            mode="lines",
            fill="toself",
            name="Confidence interval",
            line=dict(color=self._fill(style.primary_color), width=0),
            fillcolor=self._fill(style.primary_color),
        ))
        fig.update_layout(
            **self._layout(
                title=None if thumbnail_mode else bench_id,
                show_legend=not thumbnail_mode,
                legend=LEGEND_INSIDE,
            ),
            xaxis=dict(title=dict(text=x_label), showgrid=True),
            yaxis=dict(title=dict(text=f"Total time ({prefix}s)"), showgrid=True),
        )
        return self._spec(fig, path, size)

    def abs_distributions(
        self,
        distributions: Distributions,
        estimates: Estimates,
        bench_id: str,
        output_directory: str | os.PathLike,
        *,
        generation: str = "new",
    ) -> list[ChartSpec]:
        """One bootstrap-distribution chart per statistic in ``distributions``."""
        specs = []
        for statistic, distribution in distributions.items():
            path = Path(output_directory) / bench_id / generation / f"{statistic}.svg"
            xs, ys, p, y_p, start, end = self._bootstrap_curve(distribution, estimates[statistic])

            x_scale, prefix = resolve_time_scale(float(xs.max()))
            # Keep the area under the curve at 1 in display units.
            y_scale = 1.0 / x_scale

            fig = go.Figure()
            self._bootstrap_traces(fig, xs, ys, p, y_p, start, end, x_scale, y_scale)
            fig.update_layout(
                **self._layout(title=f"{bench_id}: {statistic}"),
                xaxis=dict(
                    title=dict(text=f"Average time ({prefix}s)"),
                    range=[float(xs.min()) * x_scale, float(xs.max()) * x_scale],
                ),
                yaxis=dict(title=dict(text="Density (a.u.)")),
            )
            specs.append(self._spec(fig, path, None))
        return specs

    def rel_distributions(
        self,
        distributions: Distributions,
        estimates: Estimates,
        bench_id: str,
        output_directory: str | os.PathLike,
        noise_threshold: float,
    ) -> list[ChartSpec]:
        """One relative-change chart per statistic, with the noise threshold shaded."""
        style = self.style
        specs = []
        for statistic, distribution in distributions.items():
            path = Path(output_directory) / bench_id / "change" / f"{statistic}.svg"
            xs, ys, p, y_p, start, end = self._bootstrap_curve(distribution, estimates[statistic])

            x_min, x_max = float(xs.min()), float(xs.max())
            band_start, band_end = noise_band(x_min, x_max, noise_threshold)

            fig = go.Figure()
            self._bootstrap_traces(fig, xs, ys, p, y_p, start, end, 100.0, 1.0)
            fig.add_trace(go.Scatter(
                x=[band_start * 100, band_end * 100, band_end * 100, band_start * 100],
                y=[0.0, 0.0, 1.0, 1.0],
                yaxis="y2",
                mode="lines",
                fill="toself",
                name="Noise threshold",
                line=dict(color=_with_alpha(style.severe_color, style.noise_opacity), width=0),
                fillcolor=_with_alpha(style.severe_color, style.noise_opacity),
            ))
            fig.update_layout(
                **self._layout(title=f"{bench_id}: {statistic}"),
                xaxis=dict(title=dict(text="Relative change (%)"), range=[x_min * 100, x_max * 100]),
                yaxis=dict(title=dict(text="Density (a.u.)")),
                yaxis2=dict(overlaying="y", side="right", range=[0.0, 1.0], visible=False),
            )
            specs.append(self._spec(fig, path, None))
        return specs

    def t_test(
        self,
        t: float,
        distribution: Sequence[float],
        bench_id: str,
        output_directory: str | os.PathLike,
    ) -> ChartSpec:
        """Welch t distribution under the null hypothesis and the observed t statistic."""
        style = self.style
        path = Path(output_directory) / bench_id / "change" / "t-test.svg"
        xs, ys = kde.sweep(distribution, style.kde_points)

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=xs.tolist(),
            y=ys.tolist(),
            mode="lines",
            fill="tozeroy",
            name="t distribution",
            line=dict(color=self._fill(style.primary_color), width=0),
            fillcolor=self._fill(style.primary_color),
        ))
        # Full-height reference line on a hidden [0, 1] axis.
        fig.add_trace(go.Scatter(
            x=[t, t],
            y=[0.0, 1.0],
            yaxis="y2",
            mode="lines",
            name="t statistic",
            line=dict(color=style.primary_color, width=style.line_width, dash="solid"),
        ))
        fig.update_layout(
            **self._layout(title=f"{bench_id}: Welch t test"),
            xaxis=dict(title=dict(text="t score")),
            yaxis=dict(title=dict(text="Density")),
            yaxis2=dict(overlaying="y", side="right", range=[0.0, 1.0], visible=False),
        )
        return self._spec(fig, path, None)

    # -----------------------------
    # Group summaries
    # -----------------------------
    def summary_inputs(
        self,
        group_id: str,
        statistic: Statistic,
        table: pd.DataFrame,
        path: str | os.PathLike,
    ) -> ChartSpec:
        """Error bars of one statistic against numeric benchmark inputs.

        Args:
            table: Rows in plotting order with columns input, point, lower, upper.
        """
        style = self.style
        scale, prefix = resolve_time_scale(float(table["upper"].max()))
        point = table["point"].to_numpy(dtype=float)
        lower = table["lower"].to_numpy(dtype=float)
        upper = table["upper"].to_numpy(dtype=float)

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=table["input"].astype(float).tolist(),
            y=(point * scale).tolist(),
            mode="markers",
            name=str(statistic),
            marker=dict(size=style.point_size, symbol="circle"),
            error_y=dict(
                type="data",
                symmetric=False,
                array=((upper - point) * scale).tolist(),
                arrayminus=((point - lower) * scale).tolist(),
                thickness=style.line_width,
            ),
        ))
        fig.update_layout(
            **self._layout(title=group_id, legend=LEGEND_INSIDE),
            xaxis=dict(title=dict(text="Input"), type="linear", showgrid=True),
            yaxis=dict(title=dict(text=f"Average time ({prefix}s)"), type="linear", showgrid=True),
        )
        return self._spec(fig, path, None)

    def summary_ranking(
        self,
        group_id: str,
        statistic: Statistic,
        table: pd.DataFrame,
        path: str | os.PathLike,
    ) -> ChartSpec:
        """Horizontal error bars, one row per benchmark, with relative times on the right axis.

        Args:
            table: Rows in plotting order (bottom row first) with columns
                label, point, lower, upper, relative.
        """
        style = self.style
        n = len(table)
        tics = _tics(n)
        scale, prefix = resolve_time_scale(float(table["upper"].max()))
        point = table["point"].to_numpy(dtype=float)
        lower = table["lower"].to_numpy(dtype=float)
        upper = table["upper"].to_numpy(dtype=float)

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=(point * scale).tolist(),
            y=tics,
            mode="markers",
            name="Confidence Interval",
            marker=dict(size=style.point_size, symbol="circle"),
            error_x=dict(
                type="data",
                symmetric=False,
                array=((upper - point) * scale).tolist(),
                arrayminus=((point - lower) * scale).tolist(),
                thickness=style.line_width,
            ),
        ))
        # Invisible twin so the right-hand axis is drawn.
        fig.add_trace(go.Scatter(
            x=(point * scale).tolist(),
            y=tics,
            yaxis="y2",
            mode="markers",
            marker=dict(opacity=0),
            showlegend=False,
            hoverinfo="skip",
        ))
        fig.update_layout(
            **self._layout(title=f"{group_id}: Estimates of the {statistic}s"),
            xaxis=dict(title=dict(text=f"Average time ({prefix}s)"), type="linear", showgrid=True),
            yaxis=dict(
                title=dict(text="Input"),
                range=[0.0, float(n)],
                tickmode="array",
                tickvals=tics,
                ticktext=table["label"].astype(str).tolist(),
            ),
            yaxis2=dict(
                title=dict(text="Relative time"),
                overlaying="y",
                side="right",
                range=[0.0, float(n)],
                tickmode="array",
                tickvals=tics,
                ticktext=table["relative"].astype(str).tolist(),
            ),
        )
        return self._spec(fig, path, None)

    def violin(
        self,
        group_id: str,
        samples: Mapping[str, Sequence[float]],
        path: str | os.PathLike,
    ) -> ChartSpec:
        """Peak-normalized density of every benchmark, one row each, with median markers.

        Args:
            samples: Label -> per-iteration times, in row order (bottom first).
        """
        style = self.style
        labels = list(samples)
        tics = _tics(len(labels))

        curves = []
        medians = []
        for label in labels:
            values = np.asarray(samples[label], dtype=float)
            xs, ys = kde.sweep(values, style.kde_points)
            curves.append((xs, normalize_peak(ys)))
            medians.append(float(np.median(values)))

        all_xs = np.concatenate([xs for xs, _ in curves])
        positive = all_xs[all_xs > 0]
        scale, prefix = resolve_time_scale(float(positive.max() if len(positive) else all_xs.max()))

        fig = go.Figure()
        for i, (xs, ys) in enumerate(curves):
            row = tics[i]
            upper = row + ys * 0.5
            lower = row - ys * 0.5
            fig.add_trace(go.Scatter(
                x=(np.concatenate([xs, xs[::-1]]) * scale).tolist(),
                y=np.concatenate([upper, lower[::-1]]).tolist(),
                mode="lines",
                fill="toself",
                name="PDF",
                legendgroup="pdf",
                showlegend=i == 0,
                line=dict(color=self._fill(style.primary_color), width=0),
                fillcolor=self._fill(style.primary_color),
            ))
        fig.add_trace(go.Scatter(
            x=[m * scale for m in medians],
            y=tics,
            mode="markers",
            name="Median",
            marker=dict(color=style.median_color, size=2 * style.point_size, symbol="cross"),
        ))
        fig.update_layout(
            **self._layout(title=f"{group_id}: Violin plot"),
            xaxis=dict(title=dict(text=f"Average time ({prefix}s)"), type="linear", showgrid=True),
            yaxis=dict(
                title=dict(text="Input"),
                range=[0.0, float(len(labels))],
                tickmode="array",
                tickvals=tics,
                ticktext=labels,
            ),
        )
        return self._spec(fig, path, None)
