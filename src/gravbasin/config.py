# src/gravbasin/config.py
"""
Numerical parameters and render configuration.

``SimParams`` carries every integration/classification constant with the
reference values as defaults and packs itself into the float64 array read by
the compiled kernels. ``RenderConfig`` aggregates everything a render needs
and can be loaded from a TOML file::

    [render]
    width = 1500
    height = 1500
    zoom = 1.5

    [attractors]
    seed = 7
    perturbation = 0.2
    mode = "forward"

    [simulation]
    steps = 1000
    damping = 0.9999

    [execution]
    jit = true
    parallel_mode = "auto"
    max_workers = 8

    [output]
    dir = "figs"
    prefix = "attractors"
"""
from __future__ import annotations

import dataclasses
import math
import tomllib
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from gravbasin.errors import ConfigError

__all__ = [
    "SimParams",
    "RenderConfig",
    "load_config",
    "PARALLEL_MODES",
    "PERTURBATION_MODES",
]

PARALLEL_MODES = ("auto", "threads", "process", "none")
PERTURBATION_MODES = ("forward", "centered")

# Packed layout of SimParams (index into the float64 config array)
CFG_STEPS = 0
CFG_STEP_SIZE = 1
CFG_DAMPING = 2
CFG_START_RADIUS = 3
CFG_CAPTURE_TOL = 4
CFG_ESCAPE_RADIUS = 5
CFG_REST_SPEED = 6
CFG_FAR_SQ = 7
CFG_G = 8
CFG_SIZE = 9


@dataclass(frozen=True)
class SimParams:
    steps: int = 1000
    step_size: float = 0.01 / 2
    damping: float = 0.9999
    start_radius: float = 0.1
    capture_tol: float = 0.02
    escape_radius: float = 2000.0
    rest_speed: float = 0.0001
    far_sq: float = 2000.0
    g: float = 1.0

    def __post_init__(self) -> None:
        if isinstance(self.steps, bool) or not isinstance(self.steps, (int, np.integer)):
            raise ValueError(f"steps must be an integer, got {self.steps!r}")
        if self.steps <= 0:
            raise ValueError("steps must be positive")
        for name in ("step_size", "g"):
            val = getattr(self, name)
            if not (math.isfinite(val) and val > 0.0):
                raise ValueError(f"{name} must be a positive finite number")
        if not (0.0 < self.damping <= 1.0):
            raise ValueError("damping must be in (0, 1]")
        for name in ("start_radius", "capture_tol", "escape_radius", "rest_speed", "far_sq"):
            if not getattr(self, name) >= 0.0:
                raise ValueError(f"{name} must be non-negative")

    def pack(self) -> np.ndarray:
        """Pack into the float64 array layout read by the kernels."""
        cfg = np.zeros((CFG_SIZE,), dtype=np.float64)
        cfg[CFG_STEPS] = float(self.steps)
        cfg[CFG_STEP_SIZE] = self.step_size
        cfg[CFG_DAMPING] = self.damping
        cfg[CFG_START_RADIUS] = self.start_radius
        cfg[CFG_CAPTURE_TOL] = self.capture_tol
        cfg[CFG_ESCAPE_RADIUS] = self.escape_radius
        cfg[CFG_REST_SPEED] = self.rest_speed
        cfg[CFG_FAR_SQ] = self.far_sq
        cfg[CFG_G] = self.g
        return cfg


@dataclass(frozen=True)
class RenderConfig:
    width: int = 1500
    height: int = 1500
    zoom: float = 1.5
    seed: int | None = None
    perturbation: float = 0.2
    perturbation_mode: str = "forward"
    sim: SimParams = field(default_factory=SimParams)
    jit: bool = True
    parallel_mode: str = "auto"
    max_workers: int | None = None
    output_dir: Path = Path("figs")
    prefix: str = "attractors"

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {val!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if not isinstance(self.jit, (bool, np.bool_)):
            raise ValueError(f"jit must be a boolean, got {self.jit!r}")
        if self.max_workers is not None and (
            isinstance(self.max_workers, bool) or not isinstance(self.max_workers, (int, np.integer))
        ):
            raise ValueError(f"max_workers must be an integer, got {self.max_workers!r}")
        if not (math.isfinite(self.zoom) and self.zoom > 0.0):
            raise ValueError("zoom must be a positive finite number")
        if self.perturbation < 0.0:
            raise ValueError("perturbation must be non-negative")
        if self.perturbation_mode not in PERTURBATION_MODES:
            raise ValueError(
                f"perturbation_mode must be one of {PERTURBATION_MODES}, got {self.perturbation_mode!r}"
            )
        if self.parallel_mode not in PARALLEL_MODES:
            raise ValueError(f"parallel_mode must be one of {PARALLEL_MODES}, got {self.parallel_mode!r}")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    def replace(self, **overrides: Any) -> "RenderConfig":
        """Return a copy with non-None overrides applied (``sim_*`` keys go to SimParams)."""
        sim_updates = {
            k[len("sim_"):]: v for k, v in overrides.items() if k.startswith("sim_") and v is not None
        }
        top = {k: v for k, v in overrides.items() if not k.startswith("sim_") and v is not None}
        if sim_updates:
            top["sim"] = dataclasses.replace(self.sim, **sim_updates)
        return dataclasses.replace(self, **top) if top else self


# table -> {toml key: RenderConfig field}
_TABLE_KEYS: dict[str, dict[str, str]] = {
    "render": {"width": "width", "height": "height", "zoom": "zoom"},
    "attractors": {"seed": "seed", "perturbation": "perturbation", "mode": "perturbation_mode"},
    "execution": {"jit": "jit", "parallel_mode": "parallel_mode", "max_workers": "max_workers"},
    "output": {"dir": "output_dir", "prefix": "prefix"},
}


def _warn_unknown(table: str, keys: set[str], valid: set[str]) -> None:
    unknown = keys - valid
    if unknown:
        warnings.warn(
            f"Unknown keys in [{table}] ignored: {sorted(unknown)}. Valid keys: {sorted(valid)}",
            RuntimeWarning,
            stacklevel=4,
        )


def config_from_mapping(data: Mapping[str, Any], *, path: str | None = None) -> RenderConfig:
    """Build a RenderConfig from parsed TOML data."""
    valid_tables = set(_TABLE_KEYS) | {"simulation"}
    unknown_tables = set(data) - valid_tables
    if unknown_tables:
        raise ConfigError(
            f"Unknown table(s) {sorted(unknown_tables)}; expected any of {sorted(valid_tables)}",
            path,
        )

    kwargs: dict[str, Any] = {}
    for table, mapping in _TABLE_KEYS.items():
        section = data.get(table, {})
        if not isinstance(section, Mapping):
            raise ConfigError(f"[{table}] must be a table", path)
        _warn_unknown(table, set(section), set(mapping))
        for key, target in mapping.items():
            if key in section:
                kwargs[target] = section[key]

    sim_section = data.get("simulation", {})
    if not isinstance(sim_section, Mapping):
        raise ConfigError("[simulation] must be a table", path)
    sim_fields = {f.name for f in dataclasses.fields(SimParams)}
    _warn_unknown("simulation", set(sim_section), sim_fields)

    try:
        sim = SimParams(**{k: v for k, v in sim_section.items() if k in sim_fields})
        return RenderConfig(sim=sim, **kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}", path) from exc


def load_config(path: str | Path) -> RenderConfig:
    """Load a RenderConfig from a TOML file."""
    target = Path(path)
    if not target.is_file():
        raise ConfigError("Config file not found", str(target))
    try:
        with open(target, "rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed TOML: {exc}", str(target)) from exc
    return config_from_mapping(data, path=str(target))
