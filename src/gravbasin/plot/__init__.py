from __future__ import annotations

from .basin import (
    DEFAULT_COLORS,
    labels_to_rgb,
    basin_plot,
    save_basin_image,
    output_path,
    show,
)

__all__ = [
    "DEFAULT_COLORS",
    "labels_to_rgb",
    "basin_plot",
    "save_basin_image",
    "output_path",
    "show",
]
