# src/gravbasin/sampling.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

__all__ = ["PlaneSampler"]


@dataclass(frozen=True)
class PlaneSampler:
    """
    Pixel grid -> plane coordinates.

    ``plane_x = ((col / width) * 2 - 1) * zoom`` and likewise for rows, so the
    grid spans ``[-zoom, zoom)`` on both axes.
    """
    width: int = 1500
    height: int = 1500
    zoom: float = 1.5

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {val!r}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if not self.zoom > 0.0:
            raise ValueError("zoom must be positive")

    def plane_x(self, col: int) -> float:
        return ((col / self.width) * 2 - 1) * self.zoom

    def plane_y(self, row: int) -> float:
        return ((row / self.height) * 2 - 1) * self.zoom

    def columns(self) -> np.ndarray:
        """Plane x for every column (same arithmetic as plane_x)."""
        cols = np.arange(self.width, dtype=np.float64)
        return ((cols / self.width) * 2 - 1) * self.zoom

    def rows(self) -> np.ndarray:
        rows = np.arange(self.height, dtype=np.float64)
        return ((rows / self.height) * 2 - 1) * self.zoom

    def cells(self) -> Iterator[tuple[int, int, float, float]]:
        """Yield ``(col, row, plane_x, plane_y)`` column-major, as the pixel loop visits them."""
        for col in range(self.width):
            px = self.plane_x(col)
            for row in range(self.height):
                yield col, row, px, self.plane_y(row)

    @property
    def extent(self) -> tuple[float, float, float, float]:
        """(left, right, bottom, top) for imshow with origin='upper'."""
        return (
            self.plane_x(0),
            self.plane_x(self.width),
            self.plane_y(self.height),
            self.plane_y(0),
        )

    def __len__(self) -> int:
        return int(self.width) * int(self.height)
