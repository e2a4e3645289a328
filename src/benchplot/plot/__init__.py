"""Chart assembly, group summaries and out-of-process rendering."""

from .chart_generator import ChartGenerator
from .chart_spec import ChartSpec
from .chart_style import ChartStyle
from .errors import (
    BenchPlotError,
    DegenerateCurveError,
    EmptyWindowError,
    GeometryError,
    OutOfDomainError,
    RenderLaunchError,
)
from .render import PendingRenders, RenderHandle, Renderer, launch_all
from .report import plot_comparison, plot_measurements
from .summary import BenchEntry, SummaryMode, summarize

__all__ = [
    "BenchEntry",
    "BenchPlotError",
    "ChartGenerator",
    "ChartSpec",
    "ChartStyle",
    "DegenerateCurveError",
    "EmptyWindowError",
    "GeometryError",
    "OutOfDomainError",
    "PendingRenders",
    "RenderHandle",
    "RenderLaunchError",
    "Renderer",
    "SummaryMode",
    "launch_all",
    "plot_comparison",
    "plot_measurements",
    "summarize",
]
