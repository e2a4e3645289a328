"""Styling shared by every chart.

ChartStyle is immutable and handed to ChartGenerator explicitly, so chart
assembly never reads module-level state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from benchplot.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChartStyle:
    font: str = "Helvetica"
    size: tuple[int, int] = (1280, 720)
    thumbnail_size: tuple[int, int] = (450, 300)
    kde_points: int = 500
    line_width: float = 2.0
    point_size: float = 4.0
    fill_opacity: float = 0.25
    noise_opacity: float = 0.1
    primary_color: str = "rgb(31, 120, 180)"   # dark blue
    mild_color: str = "rgb(255, 127, 0)"       # dark orange
    severe_color: str = "rgb(227, 26, 28)"     # dark red
    median_color: str = "black"

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["size"] = list(self.size)
        d["thumbnail_size"] = list(self.thumbnail_size)
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChartStyle":
        """Tolerant loader: unknown keys are ignored, bad values keep the default."""
        defaults = cls()
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in data.items():
            if key not in known:
                logger.warning(f"Unknown key '{key}' in chart style, ignoring")
                continue
            default = getattr(defaults, key)
            try:
                if isinstance(default, tuple):
                    width, height = raw
                    values[key] = (int(width), int(height))
                else:
                    values[key] = type(default)(raw)
            except (TypeError, ValueError):
                logger.warning(f"Invalid value {raw!r} for chart style '{key}', using default")
        return cls(**values)
