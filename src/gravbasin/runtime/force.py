# src/gravbasin/runtime/force.py
"""
Inverse-square attraction of a single attractor on a single point.

`force_components` is the kernel form (plain floats, jittable); `force` is the
object-level entry point taking a point and an `Attractor`.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gravbasin.attractors import Attractor

__all__ = ["G", "force", "force_components"]

G: float = 1.0


def force_components(px, py, ax, ay, mass, g):
    dx = ax - px
    dy = ay - py
    distance = math.sqrt(dx * dx + dy * dy)
    magnitude = g * mass / (distance * distance)
    return magnitude * dx / distance, magnitude * dy / distance


def force(point: tuple[float, float], attractor: "Attractor", *, g: float = G) -> tuple[float, float]:
    """
    Acceleration on ``point`` pulling it toward ``attractor``.

    The field is undefined at the attractor itself: a point that coincides
    exactly with the attractor raises ``ZeroDivisionError``. The integrator
    never evaluates that case (it terminates first).
    """
    px, py = point
    return force_components(float(px), float(py), attractor.x, attractor.y, attractor.mass, float(g))
