"""
Export configuration for course SVG generation.

Holds the options every layout generator understands, validation that
turns bad option values into InvalidExportConfig, and JSON config loading.
"""

import json
import math
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Union

SUPPORTED_FORMATS = ("svg",)
DECLARED_FORMATS = ("svg", "png", "pdf")
UNITS = ("meters", "feet")
TEE_SIGN_VARIANTS = ("blob", "rectangle")
HOLE_SELECTORS = ("all", "current")

FEET_PER_METER = 3.28084


class InvalidExportConfig(ValueError):
    """Raised when export options or viewport bounds cannot produce a document."""


HoleSelection = Union[str, List[int]]


@dataclass
class ExportConfig:
    """Options for a course export.

    Attributes:
        format: Output format. Only "svg" is produced.
        width: Document width in pixels
        height: Document height in pixels
        dpi: Nominal print resolution (not used by vector output)
        holes: "all", "current" (uses selected_hole_ids) or a list of hole indices
        units: "meters" or "feet" for distance labels
        tee_sign_variant: "blob" (organic clip) or "rectangle"
        verbose: Print progress lines while rendering
    """
    format: str = "svg"
    width: float = 1920
    height: float = 1080
    dpi: int = 96
    include_legend: bool = True
    include_title: bool = True
    include_hole_numbers: bool = True
    include_distances: bool = True
    holes: HoleSelection = "all"
    include_terrain: bool = True
    include_compass: bool = True
    include_scale_bar: bool = True
    include_infrastructure: bool = True
    units: str = "meters"
    include_notes: bool = True
    include_rules: bool = True
    include_course_name: bool = True
    selected_hole_ids: List[str] = field(default_factory=list)
    logo_data_url: Optional[str] = None
    tee_sign_variant: str = "blob"
    verbose: bool = False

    def validate(self) -> 'ExportConfig':
        """Check option values, raising InvalidExportConfig on the first problem.

        Returns:
            self, so calls can be chained
        """
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidExportConfig(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidExportConfig(f"{name} must be positive and finite, got {value!r}")

        if self.format not in SUPPORTED_FORMATS:
            if self.format in DECLARED_FORMATS:
                raise InvalidExportConfig(
                    f"format {self.format!r} is not produced; render svg and rasterize externally"
                )
            raise InvalidExportConfig(f"unknown format {self.format!r}")

        if self.units not in UNITS:
            raise InvalidExportConfig(f"units must be one of {UNITS}, got {self.units!r}")

        if self.tee_sign_variant not in TEE_SIGN_VARIANTS:
            raise InvalidExportConfig(
                f"tee_sign_variant must be one of {TEE_SIGN_VARIANTS}, got {self.tee_sign_variant!r}"
            )

        if isinstance(self.holes, str):
            if self.holes not in HOLE_SELECTORS:
                raise InvalidExportConfig(f"holes must be 'all', 'current' or a list, got {self.holes!r}")
        elif isinstance(self.holes, (list, tuple)):
            for index in self.holes:
                if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                    raise InvalidExportConfig(f"hole indices must be non-negative integers, got {index!r}")
        else:
            raise InvalidExportConfig(f"holes must be 'all', 'current' or a list, got {self.holes!r}")

        return self


@dataclass
class TeeSignConfig(ExportConfig):
    """Tee sign defaults: A4 portrait at 96 dpi."""
    width: float = 794
    height: float = 1123


@dataclass
class PrintConfig(ExportConfig):
    """Print booklet defaults: A4 landscape at 96 dpi."""
    width: float = 1123
    height: float = 794


def _snake_case(key: str) -> str:
    """Convert camelCase option names to snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def config_from_dict(data: dict, config_class=ExportConfig) -> ExportConfig:
    """Build a config from a dict of camelCase or snake_case keys.

    Unknown keys are ignored with a warning.
    """
    known = {f.name for f in fields(config_class)}
    kwargs = {}
    for key, value in data.items():
        name = _snake_case(key)
        if name not in known:
            print(f"  Warning: ignoring unknown export option '{key}'")
            continue
        kwargs[name] = value
    return config_class(**kwargs)


def load_export_config(path, config_class=ExportConfig) -> ExportConfig:
    """Load and validate export options from a JSON file."""
    config_path = Path(path)
    print(f"Loading configuration from {config_path}...")
    try:
        with open(config_path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidExportConfig(f"cannot read export config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidExportConfig(f"export config {config_path} must contain a JSON object")

    return config_from_dict(data, config_class).validate()
