# src/gravbasin/analysis/classify.py
from __future__ import annotations

import math
from functools import lru_cache
from typing import Callable

from gravbasin.attractors import AttractorSet
from gravbasin.config import SimParams
from gravbasin.runtime.jit import jit_compile
from gravbasin.runtime.outcomes import (
    ESCAPED,
    EXHAUSTED,
    FAR_AWAY,
    STABLE_ORBIT,
    PixelLabel,
    SimulationOutcome,
)

__all__ = ["classify", "nearest_attractor", "classify_kernel", "get_classify_kernel"]


def nearest_index(fx, fy, ax, ay):
    """(index, squared distance) of the first attractor at minimal squared distance."""
    best = 0
    best_d = math.inf
    for k in range(ax.shape[0]):
        dx = fx - ax[k]
        dy = fy - ay[k]
        d = dx * dx + dy * dy
        if d < best_d:
            best_d = d
            best = k
    return best, best_d


def emit_classify(nearest_fn: Callable) -> Callable:
    def classify_kernel(reason, fx, fy, ax, ay, far_sq):
        if reason == EXHAUSTED:
            return STABLE_ORBIT
        best, best_d = nearest_fn(fx, fy, ax, ay)
        # NaN positions never beat inf and land here too
        if reason == ESCAPED and best_d > far_sq:
            return FAR_AWAY
        return best

    return classify_kernel


classify_kernel = emit_classify(nearest_index)


@lru_cache(maxsize=None)
def get_classify_kernel(jit: bool) -> Callable:
    nearest_fn = jit_compile(nearest_index, jit=jit, component="nearest").fn
    return jit_compile(emit_classify(nearest_fn), jit=jit, component="classify").fn


def nearest_attractor(x: float, y: float, attractors: AttractorSet) -> tuple[int, float]:
    """Index and squared distance of the nearest attractor; ties go to the lower index."""
    best, best_d = nearest_index(float(x), float(y), attractors.xs, attractors.ys)
    return int(best), float(best_d)


def classify(
    outcome: SimulationOutcome,
    attractors: AttractorSet,
    far_sq: float | None = None,
) -> PixelLabel:
    """
    Map a trajectory outcome to its pixel label.

    - NEAR_ATTRACTOR_*: the attractor the trajectory was snapped to
    - EXHAUSTED: STABLE_ORBIT, whatever the final position
    - ESCAPED: nearest attractor, or FAR_AWAY when its squared distance
      exceeds ``far_sq`` (default ``SimParams().far_sq``)
    """
    if far_sq is None:
        far_sq = SimParams().far_sq
    label = classify_kernel(
        int(outcome.reason),
        float(outcome.final_x),
        float(outcome.final_y),
        attractors.xs,
        attractors.ys,
        float(far_sq),
    )
    return PixelLabel(int(label))
