"""Outcome classification and whole-grid basin maps."""
from __future__ import annotations

from .classify import classify, nearest_attractor
from .basin import BasinResult, RowResult, basin_map, iter_labels, iter_rows

__all__ = [
    "classify",
    "nearest_attractor",
    "BasinResult",
    "RowResult",
    "basin_map",
    "iter_labels",
    "iter_rows",
]
