# src/gravbasin/__init__.py
from __future__ import annotations

from importlib import metadata as importlib_metadata

from .errors import GravbasinError, ConfigError
from .config import SimParams, RenderConfig, load_config
from .attractors import Attractor, AttractorSet
from .runtime.outcomes import PixelLabel, SimulationOutcome, Termination
from .runtime.force import force
from .runtime.integrator import Integrator, simulate
from .analysis.classify import classify
from .analysis.basin import BasinResult, basin_map, iter_labels
from .sampling import PlaneSampler

try:
    __version__ = importlib_metadata.version("gravbasin")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0+local"

__all__ = [
    # Core entry points
    "render", "basin_map", "iter_labels", "simulate", "classify", "force",
    "Integrator", "AttractorSet", "Attractor", "PlaneSampler",
    # Outcomes
    "Termination", "PixelLabel", "SimulationOutcome", "BasinResult",
    # Configuration
    "SimParams", "RenderConfig", "load_config",
    # Errors
    "GravbasinError", "ConfigError",
]


def render(config: RenderConfig | None = None, *, progress: bool = False) -> BasinResult:
    """Build the attractor set and compute the basin map in one call.

    This combines ``AttractorSet.build()``, ``PlaneSampler`` and
    ``basin_map()`` using the values in ``config``. Writing the image is left
    to :mod:`gravbasin.plot`.

    Example::

        from gravbasin import render, RenderConfig
        from gravbasin.plot import save_basin_image, output_path

        result = render(RenderConfig(width=600, height=600, seed=3))
        save_basin_image(result, output_path("figs"))
    """
    config = config if config is not None else RenderConfig()
    attractors = AttractorSet.build(
        seed=config.seed,
        amount=config.perturbation,
        mode=config.perturbation_mode,  # type: ignore[arg-type]
    )
    sampler = PlaneSampler(width=config.width, height=config.height, zoom=config.zoom)
    return basin_map(
        attractors,
        sampler,
        params=config.sim,
        jit=config.jit,
        parallel_mode=config.parallel_mode,  # type: ignore[arg-type]
        max_workers=config.max_workers,
        progress=progress,
    )
