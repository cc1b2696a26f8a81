"""Exploration rate as a function of solver iterations.

Training anneals epsilon from fully random play to a small floor while the
solver runs, then holds it there. The schedule is keyed on
`DQN.current_iteration` rather than episodes, so resuming from a checkpoint
picks up at the same exploration rate.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnnealedEpsilon:
    start: float = 1.0
    floor: float = 0.1
    iterations: int = 1_000_000

    def __post_init__(self) -> None:
        for name in ("start", "floor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")

    def __call__(self, iteration: int) -> float:
        if iteration >= self.iterations:
            return self.floor
        frac = max(0, iteration) / self.iterations
        return self.start - (self.start - self.floor) * frac
