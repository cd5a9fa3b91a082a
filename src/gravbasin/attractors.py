# src/gravbasin/attractors.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Literal, Sequence

import numpy as np

from gravbasin.runtime.outcomes import N_ATTRACTORS

__all__ = [
    "BASE_POSITIONS",
    "BASE_MASS",
    "Attractor",
    "AttractorSet",
]

# Corners of the unit square, in iteration order
BASE_POSITIONS: tuple[tuple[float, float], ...] = (
    (-1.0, -1.0),
    (1.0, -1.0),
    (-1.0, 1.0),
    (1.0, 1.0),
)
BASE_MASS = 1.0


@dataclass(frozen=True)
class Attractor:
    x: float
    y: float
    mass: float

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


def _readonly(values: Iterable[float]) -> np.ndarray:
    arr = np.array(list(values), dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class AttractorSet:
    """
    The four fixed mass points of a render.

    Built once, then shared read-only by every trajectory. Iteration order is
    the index order used for first-match start checks and nearest-attractor
    tie-breaks.
    """
    attractors: tuple[Attractor, ...]

    def __post_init__(self) -> None:
        if len(self.attractors) != N_ATTRACTORS:
            raise ValueError(f"AttractorSet needs exactly {N_ATTRACTORS} attractors, got {len(self.attractors)}")
        for i, a in enumerate(self.attractors):
            if not (math.isfinite(a.x) and math.isfinite(a.y)):
                raise ValueError(f"attractor {i} has a non-finite position")
            if not (math.isfinite(a.mass) and a.mass > 0.0):
                raise ValueError(f"attractor {i} must have a positive finite mass")
        # kernel views, packed once
        object.__setattr__(self, "_xs", _readonly(a.x for a in self.attractors))
        object.__setattr__(self, "_ys", _readonly(a.y for a in self.attractors))
        object.__setattr__(self, "_masses", _readonly(a.mass for a in self.attractors))

    # ---------------- constructors ----------------

    @classmethod
    def build(
        cls,
        rng: np.random.Generator | None = None,
        *,
        seed: int | None = None,
        amount: float = 0.2,
        mode: Literal["forward", "centered"] = "forward",
    ) -> "AttractorSet":
        """
        Perturb the unit-square corners with independent uniform offsets.

        Each attractor draws three values (x, y, mass, in that order), twelve
        draws in total. ``mode="forward"`` adds ``U(0, amount)``;
        ``mode="centered"`` adds ``(U(0, 1) - 0.5) * amount``. Mass starts at 1.
        """
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        if amount < 0.0:
            raise ValueError("amount must be non-negative")
        if mode not in ("forward", "centered"):
            raise ValueError(f"mode must be 'forward' or 'centered', got {mode!r}")
        if rng is None:
            rng = np.random.default_rng(seed)

        draws = rng.random((N_ATTRACTORS, 3))
        if mode == "centered":
            offsets = (draws - 0.5) * amount
        else:
            offsets = draws * amount

        attractors = tuple(
            Attractor(
                x=bx + float(offsets[i, 0]),
                y=by + float(offsets[i, 1]),
                mass=BASE_MASS + float(offsets[i, 2]),
            )
            for i, (bx, by) in enumerate(BASE_POSITIONS)
        )
        return cls(attractors)

    @classmethod
    def corners(cls) -> "AttractorSet":
        """Unperturbed unit-square corners with unit mass."""
        return cls(tuple(Attractor(x=bx, y=by, mass=BASE_MASS) for bx, by in BASE_POSITIONS))

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]]) -> "AttractorSet":
        """Build from explicit ``(x, y, mass)`` triples."""
        attractors = []
        for p in points:
            if len(p) != 3:
                raise ValueError(f"expected (x, y, mass) triples, got {p!r}")
            attractors.append(Attractor(x=float(p[0]), y=float(p[1]), mass=float(p[2])))
        return cls(tuple(attractors))

    # ---------------- views ----------------

    @property
    def xs(self) -> np.ndarray:
        return self._xs  # type: ignore[attr-defined]

    @property
    def ys(self) -> np.ndarray:
        return self._ys  # type: ignore[attr-defined]

    @property
    def masses(self) -> np.ndarray:
        return self._masses  # type: ignore[attr-defined]

    def __len__(self) -> int:
        return len(self.attractors)

    def __iter__(self) -> Iterator[Attractor]:
        return iter(self.attractors)

    def __getitem__(self, index: int) -> Attractor:
        return self.attractors[index]

    def describe(self) -> str:
        lines = []
        for i, a in enumerate(self.attractors):
            lines.append(f"  [{i}] x={a.x:+.6f} y={a.y:+.6f} mass={a.mass:.6f}")
        return "\n".join(lines)
