"""Exceptions raised by chart assembly and rendering."""

from __future__ import annotations


class BenchPlotError(Exception):
    """Base class for benchplot errors."""


class GeometryError(BenchPlotError, ValueError):
    """A curve lookup was asked for something the curve cannot provide."""


class OutOfDomainError(GeometryError):
    """The requested x lies outside the sampled curve."""


class EmptyWindowError(GeometryError):
    """No curve sample satisfies the window bounds."""


class DegenerateCurveError(GeometryError):
    """Two neighbouring curve samples share the same x."""


class RenderLaunchError(BenchPlotError):
    """The external rendering process could not be started.

    Attributes:
        pending: Renders launched before the failure (already joined), when
            raised from launch_all(); None otherwise.
    """

    pending = None
