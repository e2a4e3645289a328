"""Out-of-process chart rendering.

Renderer.render() launches one worker process per ChartSpec and returns at
once with a RenderHandle. Handles are collected in a PendingRenders, which
the caller joins before treating the report as complete. launch_all() fans
out a batch and never loses track of renders already started:

    ```python
    renderer = Renderer(debug=True)
    with launch_all(renderer, specs) as pending:
        logger.info(f"{len(pending)} charts rendering")
    # every worker has exited here
    ```
"""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from benchplot.plot.chart_spec import ChartSpec
from benchplot.plot.errors import RenderLaunchError
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)

WORKER_MODULE = "benchplot.plot.render_worker"
DEBUG_SCRIPT_SUFFIX = ".json"


def debug_script_path(spec: ChartSpec) -> Path:
    """Where the human-readable chart script for ``spec`` goes (next to the image)."""
    return spec.output_path.with_suffix(DEBUG_SCRIPT_SUFFIX)


def write_debug_script(spec: ChartSpec) -> Optional[Path]:
    """Write the chart as pretty-printed Plotly JSON next to its output path.

    Failures are logged and otherwise ignored.

    Returns:
        The script path, or None if it could not be written.
    """
    script_path = debug_script_path(spec)
    logger.info(f"Writing chart script to {script_path}")
    try:
        script_path.write_text(spec.to_json(pretty=True), encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"Failed to write debug output {script_path}: {e}")
        return None
    return script_path


@dataclass
class RenderHandle:
    """A render worker that may still be running."""
    process: subprocess.Popen
    output_path: Path

    def done(self) -> bool:
        return self.process.poll() is not None

    def wait(self, timeout: Optional[float] = None) -> int:
        """Block until the worker exits and return its exit status."""
        return self.process.wait(timeout=timeout)

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode


class PendingRenders:
    """Owned collection of in-flight renders.

    Join it (or leave its ``with`` block) before assuming the images exist.
    """

    def __init__(self, handles: Optional[Iterable[RenderHandle]] = None) -> None:
        self._handles: list[RenderHandle] = list(handles or [])

    def add(self, handle: RenderHandle) -> None:
        self._handles.append(handle)

    def extend(self, handles: Iterable[RenderHandle]) -> None:
        self._handles.extend(handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[RenderHandle]:
        return iter(self._handles)

    def join(self) -> list[RenderHandle]:
        """Wait for every render.

        Returns:
            Handles whose worker exited with a non-zero status.
        """
        failed = []
        for handle in self._handles:
            status = handle.wait()
            if status != 0:
                logger.warning(f"Rendering {handle.output_path} failed with exit status {status}")
                failed.append(handle)
        return failed

    def __enter__(self) -> "PendingRenders":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.join()


class Renderer:
    """Launches render workers for ChartSpecs.

    Attributes:
        debug: Also write each chart's JSON script next to its image.
        python_executable: Interpreter used to run the worker module.
    """

    def __init__(self, *, debug: bool = False, python_executable: Optional[str] = None) -> None:
        self.debug = debug
        self.python_executable = python_executable or sys.executable

    @classmethod
    def from_config(cls, config) -> "Renderer":
        """Build a Renderer from a BenchPlotConfig."""
        return cls(debug=config.debug)

    def command(self, spec: ChartSpec, spec_file: Path) -> list[str]:
        return [
            self.python_executable,
            "-m",
            WORKER_MODULE,
            str(spec_file),
            str(spec.output_path),
            "--width",
            str(spec.width),
            "--height",
            str(spec.height),
        ]

    def render(self, spec: ChartSpec) -> RenderHandle:
        """Start rendering ``spec`` and return without waiting.

        Raises:
            RenderLaunchError: If the worker process cannot be started.
        """
        if self.debug:
            write_debug_script(spec)

        try:
            fd, name = tempfile.mkstemp(prefix="benchplot-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(spec.to_json())
        except OSError as e:
            raise RenderLaunchError(f"Cannot stage chart for {spec.output_path}: {e}") from e
        spec_file = Path(name)

        cmd = self.command(spec, spec_file)
        try:
            process = subprocess.Popen(cmd, stdin=subprocess.DEVNULL)
        except OSError as e:
            spec_file.unlink(missing_ok=True)
            raise RenderLaunchError(f"Cannot launch renderer for {spec.output_path}: {e}") from e

        logger.debug(f"Render started: pid={process.pid} output={spec.output_path}")
        return RenderHandle(process=process, output_path=spec.output_path)


def launch_all(
    renderer: Renderer,
    specs: Iterable[ChartSpec],
    pending: Optional[PendingRenders] = None,
) -> PendingRenders:
    """Start rendering every spec, adding the handles to ``pending``.

    If a launch fails, the renders already started (including any that were
    in ``pending`` beforehand) are joined before the error propagates, and
    are reachable as ``error.pending``.

    Raises:
        RenderLaunchError: If a render process cannot be started.
    """
    if pending is None:
        pending = PendingRenders()
    try:
        for spec in specs:
            pending.add(renderer.render(spec))
    except RenderLaunchError as e:
        logger.error(f"Render launch failed, waiting for {len(pending)} started renders: {e}")
        pending.join()
        e.pending = pending
        raise
    return pending
