# src/gravbasin/runtime/outcomes.py
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "Termination",
    "PixelLabel",
    "SimulationOutcome",
    # int constants (jit-friendly)
    "NEAR_START", "NEAR_RUN", "ESCAPED", "EXHAUSTED",
    "STABLE_ORBIT", "FAR_AWAY", "N_ATTRACTORS",
]

class Termination(IntEnum):
    """Rule that ended a trajectory's integration."""
    NEAR_ATTRACTOR_AT_START = 0    # seed already inside the start radius
    NEAR_ATTRACTOR_DURING_RUN = 1  # per-axis near-miss during stepping
    ESCAPED = 2                    # flew off or came to rest
    EXHAUSTED = 3                  # step budget used up


class PixelLabel(IntEnum):
    """Color class handed to the sink, one per pixel."""
    ATTRACTOR_0 = 0
    ATTRACTOR_1 = 1
    ATTRACTOR_2 = 2
    ATTRACTOR_3 = 3
    STABLE_ORBIT = 4
    FAR_AWAY = 5

    @classmethod
    def for_attractor(cls, index: int) -> "PixelLabel":
        if not 0 <= index < N_ATTRACTORS:
            raise ValueError(f"attractor index {index} out of range 0..{N_ATTRACTORS - 1}")
        return cls(index)

    @property
    def attractor_index(self) -> int | None:
        """Index of the attractor this label names, or None for the two outcome labels."""
        return int(self) if self < N_ATTRACTORS else None


# Plain int constants for kernels
NEAR_START: int = int(Termination.NEAR_ATTRACTOR_AT_START)
NEAR_RUN: int = int(Termination.NEAR_ATTRACTOR_DURING_RUN)
ESCAPED: int = int(Termination.ESCAPED)
EXHAUSTED: int = int(Termination.EXHAUSTED)

STABLE_ORBIT: int = int(PixelLabel.STABLE_ORBIT)
FAR_AWAY: int = int(PixelLabel.FAR_AWAY)
N_ATTRACTORS: int = 4


@dataclass(frozen=True)
class SimulationOutcome:
    """
    Terminal state of one trajectory.

    Fields:
      - final_x, final_y: final position (an attractor's exact position for the
        two near-attractor reasons)
      - reason: Termination
      - steps: integration steps started before termination
        (0 for NEAR_ATTRACTOR_AT_START, the full budget for EXHAUSTED)
    """
    final_x: float
    final_y: float
    reason: Termination
    steps: int = 0

    @property
    def near_attractor(self) -> bool:
        return self.reason in (
            Termination.NEAR_ATTRACTOR_AT_START,
            Termination.NEAR_ATTRACTOR_DURING_RUN,
        )
