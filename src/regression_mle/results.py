"""
Immutable results produced by a completed optimizer run.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .objective import Sense


@dataclass(frozen=True)
class RunMetadata:
    """
    Bookkeeping of one run.

    ``best_history[k]`` is the best objective value known after
    generation/iteration ``k`` (index 0 is the initial population/swarm).
    ``elapsed_seconds`` does not take part in equality so that two runs
    with the same seed compare equal.
    """
    algorithm: str
    seed: int
    iterations: int
    evaluations: int
    degenerate_evaluations: int
    best_history: Tuple[float, ...]
    converged: bool
    iterations_since_improvement: int
    final_diversity: float
    elapsed_seconds: float = field(default=0.0, compare=False)


@dataclass(frozen=True)
class SearchResult:
    """Best parameter vector of a run and its objective value."""
    position: Tuple[float, ...]
    value: float
    sense: Sense
    metadata: RunMetadata

    @classmethod
    def build(cls, position, value, sense, metadata) -> "SearchResult":
        return cls(
            position=tuple(float(v) for v in position),
            value=float(value),
            sense=Sense(sense),
            metadata=metadata,
        )

    @property
    def fitness(self) -> float:
        """Objective value in the maximizing convention."""
        return self.sense.to_maximized(self.value)

    def as_array(self) -> np.ndarray:
        return np.array(self.position, dtype=np.float64)
