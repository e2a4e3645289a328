"""Render one serialized chart to an image file.

Run by Renderer in a separate process:

    python -m benchplot.plot.render_worker SPEC_JSON OUTPUT --width 1280 --height 720

The spec file is a temporary file owned by this process; it is removed once read.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import plotly.graph_objects as go
import plotly.io as pio

from benchplot.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def load_figure(spec_file: Path, *, remove: bool = True) -> go.Figure:
    """Read a Plotly figure from JSON, deleting the file afterwards if asked."""
    try:
        return pio.from_json(spec_file.read_text(encoding="utf-8"), skip_invalid=True)
    finally:
        if remove:
            spec_file.unlink(missing_ok=True)


def render(spec_file: Path, output: Path, width: int, height: int) -> None:
    fig = load_figure(spec_file)
    image_format = output.suffix.lstrip(".") or "svg"
    pio.write_image(fig, str(output), format=image_format, width=width, height=height)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="benchplot-render", description="Render a chart spec to an image.")
    parser.add_argument("spec", type=Path, help="Plotly figure JSON (deleted after reading)")
    parser.add_argument("output", type=Path, help="Image path; the suffix selects the format")
    parser.add_argument("--width", type=int, default=1280)
    parser.add_argument("--height", type=int, default=720)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        render(args.spec, args.output, args.width, args.height)
    except Exception as e:
        logger.error(f"Failed to render {args.output}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
