"""
Convergence monitoring for the optimizers.

Runs always stop on their configured budget. The tracker here only reports
whether the best value has stabilized, which ends up in
``RunMetadata.converged``.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .bounds import Bounds
from .objective import Sense


def normalize_positions(positions, bounds: Bounds) -> np.ndarray:
    """
    Map positions onto the unit hyper-cube of ``bounds``.

    Fixed dimensions (lower == upper) are set to the midpoint 0.5.

    Parameters
    ----------
    positions : array-like
        Positions, shape ``(N, D)``.
    bounds : Bounds
        Search space the positions live in.

    Returns
    -------
    np.ndarray
        Normalized positions (N x D)
    """
    X = np.asarray(positions, dtype=np.float64)
    variable = ~bounds.fixed_mask
    X_norm = np.full_like(X, 0.5)
    X_norm[:, variable] = (X[:, variable] - bounds.lower[variable]) / bounds.span[variable]
    return X_norm


def population_diversity(positions, bounds: Bounds) -> float:
    """Mean per-dimension standard deviation of the normalized positions."""
    X_norm = normalize_positions(positions, bounds)
    if X_norm.shape[0] < 2 or np.all(X_norm == X_norm[0]):
        return 0.0
    return float(np.mean(np.std(X_norm, axis=0)))


@dataclass
class StagnationTracker:
    """
    Tracks the best value across generations/iterations.

    An improvement is a change of the best value by more than
    ``max(tolerance, tolerance * |best|)`` in the direction of ``sense``.
    The run counts as converged once ``window`` consecutive steps pass
    without an improvement.
    """
    sense: Sense
    window: int
    tolerance: float = 1e-8

    best_history: List[float] = field(default_factory=list)
    best_value: Optional[float] = None
    iterations_since_improvement: int = 0

    def __post_init__(self):
        self.sense = Sense(self.sense)
        if self.best_value is None:
            self.best_value = self.sense.worst

    def _threshold(self, value):
        return max(self.tolerance, self.tolerance * abs(value))

    def update(self, best_value: float) -> bool:
        """
        Record the best value known after one step.

        Returns
        -------
        bool
            True if the value improved on the previous best by more than
            the tolerance.
        """
        best_value = float(best_value)
        improved = (
            not self.best_history
            or (self.sense.better(best_value, self.best_value)
                and abs(best_value - self.best_value) > self._threshold(self.best_value))
        )
        if self.sense.better(best_value, self.best_value):
            self.best_value = best_value
        self.best_history.append(self.best_value)
        if improved:
            self.iterations_since_improvement = 0
        else:
            self.iterations_since_improvement += 1
        return bool(improved)

    @property
    def converged(self) -> bool:
        return self.iterations_since_improvement >= self.window

    def as_log_dict(self):
        return {
            "best_value": self.best_value,
            "iterations_since_improvement": self.iterations_since_improvement,
            "converged": self.converged,
        }
