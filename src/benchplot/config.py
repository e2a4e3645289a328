"""
benchplot config persistence (platformdirs + JSON).

Persisted items (schema v1):
- debug: write a chart script next to every rendered image
- style: ChartStyle dict representation

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches -> defaults are used
- Unknown keys in loaded JSON are ignored with warnings
- BENCHPLOT_DEBUG=1 in the environment turns debug on regardless of the file
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from benchplot.plot.chart_style import ChartStyle
from benchplot.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION: int = 1
DEBUG_ENV = "BENCHPLOT_DEBUG"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class BenchPlotConfig:
    schema_version: int = SCHEMA_VERSION
    debug: bool = False
    style: ChartStyle = field(default_factory=ChartStyle)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "debug": self.debug,
            "style": self.style.to_dict(),
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "BenchPlotConfig":
        """Tolerant loader: ignores unknown keys and malformed sections."""
        schema_version = int(d.get("schema_version", -1))
        debug = bool(d.get("debug", False))

        style_raw = d.get("style", {})
        if isinstance(style_raw, dict):
            style = ChartStyle.from_dict(style_raw)
        else:
            logger.warning("style is not a dict, using default style")
            style = ChartStyle()

        known_keys = {"schema_version", "debug", "style"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in benchplot config, ignoring")

        return cls(schema_version=schema_version, debug=debug, style=style)

    @staticmethod
    def default_config_path(app_name: str = "benchplot", filename: str = "config.json") -> Path:
        """OS-appropriate per-user config path (e.g. ~/.config/benchplot/config.json)."""
        return Path(user_config_dir(app_name)) / filename

    @classmethod
    def load(cls, *, config_path: Optional[Path] = None) -> "BenchPlotConfig":
        """Load config from disk, falling back to defaults, then apply env overrides."""
        path = config_path or cls.default_config_path()
        cfg = cls()
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(parsed, dict):
                logger.warning(f"benchplot config at {path} does not contain a dict, using defaults")
            else:
                loaded = cls.from_json_dict(parsed)
                if loaded.schema_version != SCHEMA_VERSION:
                    logger.warning(
                        f"benchplot config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={SCHEMA_VERSION}, using defaults"
                    )
                else:
                    cfg = loaded
        except FileNotFoundError:
            logger.debug(f"benchplot config not found at {path}, using defaults")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Error loading benchplot config from {path}: {e}, using defaults")

        if _env_flag(DEBUG_ENV):
            cfg.debug = True
        return cfg

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Write config to disk."""
        path = config_path or self.default_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_json_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved benchplot config to {path}")
        return path
