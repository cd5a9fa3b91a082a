# src/gravbasin/runtime/integrator.py
"""
Damped explicit integration of one trajectory under the four attractors.

Per step, for each attractor in order: evaluate the force at the step's
starting position, add it to the velocity, then test the per-axis near-miss
window. After all attractors: damp, advance position, then test escape/rest.

The scheme is deliberately lossy (damping is applied every step and position
uses the already-updated velocity), so outcomes depend on the exact operation
order below. Do not reorder.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import Callable

import numpy as np

from gravbasin.attractors import AttractorSet
from gravbasin.config import (
    CFG_CAPTURE_TOL,
    CFG_DAMPING,
    CFG_ESCAPE_RADIUS,
    CFG_G,
    CFG_REST_SPEED,
    CFG_START_RADIUS,
    CFG_STEP_SIZE,
    CFG_STEPS,
    SimParams,
)
from gravbasin.runtime.force import force_components
from gravbasin.runtime.jit import jit_compile
from gravbasin.runtime.outcomes import (
    ESCAPED,
    EXHAUSTED,
    NEAR_RUN,
    NEAR_START,
    SimulationOutcome,
    Termination,
)

__all__ = ["Integrator", "simulate", "emit_simulate", "get_simulate_kernel"]


def emit_simulate(force_fn: Callable) -> Callable:
    """
    Generate a jittable trajectory kernel bound to ``force_fn``.

    Signature:
        reason, x, y, steps = kernel(
            x0: float64, y0: float64,
            ax: float64[:], ay: float64[:], am: float64[:],
            cfg: float64[:]          # SimParams.pack()
        )
    """
    def simulate_kernel(x0, y0, ax, ay, am, cfg):
        n_attr = ax.shape[0]

        # start proximity: first match in iteration order, not nearest
        start_radius = cfg[CFG_START_RADIUS]
        for k in range(n_attr):
            dx = x0 - ax[k]
            dy = y0 - ay[k]
            if math.sqrt(dx * dx + dy * dy) < start_radius:
                return NEAR_START, ax[k], ay[k], 0

        steps = int(cfg[CFG_STEPS])
        dt = cfg[CFG_STEP_SIZE]
        damping = cfg[CFG_DAMPING]
        tol = cfg[CFG_CAPTURE_TOL]
        escape_radius = cfg[CFG_ESCAPE_RADIUS]
        rest_speed = cfg[CFG_REST_SPEED]
        g = cfg[CFG_G]

        x = x0
        y = y0
        vx = 0.0
        vy = 0.0
        for i in range(steps):
            for k in range(n_attr):
                # field undefined where the distance (or its square) underflows
                # to zero, including subnormal offsets: treat as captured
                ddx = ax[k] - x
                ddy = ay[k] - y
                r = math.sqrt(ddx * ddx + ddy * ddy)
                if r * r == 0.0:
                    return NEAR_RUN, ax[k], ay[k], i + 1
                fx, fy = force_fn(x, y, ax[k], ay[k], am[k], g)
                vx += fx * dt
                vy += fy * dt
                # per-axis window, intentionally not radial
                if abs(x - ax[k]) < tol and abs(y - ay[k]) < tol:
                    return NEAR_RUN, ax[k], ay[k], i + 1

            vx *= damping
            vy *= damping
            x += vx * dt
            y += vy * dt

            dist = math.sqrt(x * x + y * y)
            speed = math.sqrt(vx * vx + vy * vy)
            if dist > escape_radius or speed < rest_speed:
                return ESCAPED, x, y, i + 1

        return EXHAUSTED, x, y, steps

    return simulate_kernel


@lru_cache(maxsize=None)
def get_simulate_kernel(jit: bool) -> Callable:
    """Kernel for the requested execution mode (compiled once per process)."""
    force_fn = jit_compile(force_components, jit=jit, component="force").fn
    return jit_compile(emit_simulate(force_fn), jit=jit, component="simulate").fn


class Integrator:
    """
    Trajectory simulator bound to one AttractorSet and one SimParams.

    Holds no per-trajectory state; safe to share across threads.
    """
    def __init__(self, attractors: AttractorSet, params: SimParams | None = None, *, jit: bool = True):
        self.attractors = attractors
        self.params = params if params is not None else SimParams()
        self.jit = bool(jit)
        self._cfg = self.params.pack()
        self._kernel = get_simulate_kernel(self.jit)

    def simulate(self, x0: float, y0: float) -> SimulationOutcome:
        reason, x, y, steps = self._kernel(
            float(x0),
            float(y0),
            self.attractors.xs,
            self.attractors.ys,
            self.attractors.masses,
            self._cfg,
        )
        return SimulationOutcome(
            final_x=float(x),
            final_y=float(y),
            reason=Termination(int(reason)),
            steps=int(steps),
        )

    def simulate_many(self, points: np.ndarray) -> list[SimulationOutcome]:
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {pts.shape}")
        return [self.simulate(px, py) for px, py in pts]


def simulate(
    x0: float,
    y0: float,
    attractors: AttractorSet,
    params: SimParams | None = None,
    *,
    jit: bool = True,
) -> SimulationOutcome:
    """Simulate one trajectory seeded at rest at ``(x0, y0)``."""
    return Integrator(attractors, params, jit=jit).simulate(x0, y0)
