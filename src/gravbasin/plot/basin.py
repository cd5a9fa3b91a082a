# src/gravbasin/plot/basin.py
from __future__ import annotations

import time
from pathlib import Path
from typing import Mapping

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import to_rgb

from gravbasin.analysis.basin import BasinResult
from gravbasin.runtime.outcomes import PixelLabel

__all__ = [
    "DEFAULT_COLORS",
    "labels_to_rgb",
    "basin_plot",
    "save_basin_image",
    "output_path",
    "show",
]

DEFAULT_COLORS: dict[PixelLabel, str] = {
    PixelLabel.ATTRACTOR_0: "red",
    PixelLabel.ATTRACTOR_1: "green",
    PixelLabel.ATTRACTOR_2: "blue",
    PixelLabel.ATTRACTOR_3: "yellow",
    PixelLabel.STABLE_ORBIT: "white",
    PixelLabel.FAR_AWAY: "black",
}


def _lut(colors: Mapping[PixelLabel, str] | None) -> np.ndarray:
    table = dict(DEFAULT_COLORS)
    if colors:
        table.update({PixelLabel(k): v for k, v in colors.items()})
    lut = np.zeros((len(PixelLabel), 3), dtype=np.uint8)
    for label, color in table.items():
        lut[int(label)] = np.round(np.asarray(to_rgb(color)) * 255.0).astype(np.uint8)
    return lut


def labels_to_rgb(labels: np.ndarray, colors: Mapping[PixelLabel, str] | None = None) -> np.ndarray:
    """
    Label raster ``[row, col]`` -> uint8 RGB image of shape ``(H, W, 3)``.

    ``colors`` overrides entries of DEFAULT_COLORS (any matplotlib color spec).
    """
    arr = np.asarray(labels)
    if arr.ndim != 2:
        raise ValueError(f"labels must be 2D, got shape {arr.shape}")
    if arr.size and (arr.min() < 0 or arr.max() >= len(PixelLabel)):
        raise ValueError("labels contain values outside PixelLabel")
    return _lut(colors)[arr.astype(np.intp)]


def output_path(directory: str | Path, prefix: str = "attractors", *, epoch_ms: int | None = None) -> Path:
    """``<directory>/<prefix>_<epoch milliseconds>.png``"""
    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return Path(directory) / f"{prefix}_{epoch_ms}.png"


def save_basin_image(
    result: BasinResult | np.ndarray,
    path: str | Path,
    *,
    colors: Mapping[PixelLabel, str] | None = None,
) -> Path:
    """Write the label raster as a PNG, one pixel per grid cell. Returns the written path."""
    labels = result.labels if isinstance(result, BasinResult) else result
    target = Path(path)
    if not target.suffix:
        target = target.with_suffix(".png")
    target.parent.mkdir(parents=True, exist_ok=True)
    plt.imsave(target, labels_to_rgb(labels, colors))
    return target


def basin_plot(
    result: BasinResult,
    *,
    ax=None,
    colors: Mapping[PixelLabel, str] | None = None,
    show_attractors: bool = True,
    title: str | None = None,
):
    """Draw the basin raster on plane axes and mark the attractors. Returns the Axes."""
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))
    ax.imshow(
        labels_to_rgb(result.labels, colors),
        extent=result.sampler.extent,
        origin="upper",
        interpolation="nearest",
    )
    if show_attractors:
        ax.scatter(
            result.attractors.xs,
            result.attractors.ys,
            s=30.0 * result.attractors.masses,
            c="none",
            edgecolors="magenta",
            linewidths=1.2,
            zorder=3,
        )
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    if title is not None:
        ax.set_title(title)
    return ax


def show() -> None:
    plt.show()
