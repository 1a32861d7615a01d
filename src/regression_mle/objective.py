"""
Objective functions searched by the optimizers.

An objective maps a parameter vector to a scalar. The GA maximizes, the PSO
minimizes, so every objective carries its ``sense``. ``evaluate`` never
raises on a vector of the right size: undefined or non-finite values are
replaced by the dominated value of the sense, which is strictly worse than
any regular value.
"""

import enum
import math
from abc import ABC, abstractmethod

import numpy as np

from .dataset import Dataset
from .errors import DegenerateObjective

_FLOAT_MAX = float(np.finfo(np.float64).max)
_LOG_2PI = math.log(2.0 * math.pi)


class Sense(str, enum.Enum):
    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"

    @property
    def worst(self) -> float:
        """Dominated value substituted for degenerate candidates."""
        return -_FLOAT_MAX if self is Sense.MAXIMIZE else _FLOAT_MAX

    def better(self, a: float, b: float) -> bool:
        """True if ``a`` is strictly better than ``b``."""
        return a > b if self is Sense.MAXIMIZE else a < b

    def to_maximized(self, value: float) -> float:
        return value if self is Sense.MAXIMIZE else -value


class Objective(ABC):
    """
    Deterministic scalar function of a parameter vector.

    Subclasses implement ``compute``; it may raise ``DegenerateObjective``
    or produce floating-point faults, both of which ``evaluate`` contains.
    """

    sense = Sense.MAXIMIZE

    @abstractmethod
    def compute(self, params: np.ndarray) -> float:
        """Raw objective value, without degenerate-value containment."""

    def evaluate(self, params) -> float:
        params = np.asarray(params, dtype=np.float64)
        worst = self.sense.worst
        try:
            with np.errstate(divide="raise", over="raise", invalid="raise", under="ignore"):
                value = float(self.compute(params))
        except (DegenerateObjective, FloatingPointError, ZeroDivisionError, OverflowError):
            return worst
        if not math.isfinite(value) or not self.sense.better(value, worst):
            return worst
        return value

    def __call__(self, params) -> float:
        return self.evaluate(params)

    def is_degenerate(self, value: float) -> bool:
        return value == self.sense.worst


class GaussianLogLikelihood(Objective):
    """
    Log-likelihood of ``(intercept, slope, sigma)`` given a fixed dataset.

    Residuals ``y - (intercept + slope * x)`` are scored under N(0, sigma);
    the sum of the log-densities is returned. ``sigma <= 0`` is degenerate.

    A positive sigma so small that ``sigma * sigma`` underflows to zero is
    degenerate as well: the division raises ``ZeroDivisionError`` and the
    candidate gets the same worst value as ``sigma <= 0`` rather than a
    strictly worse one.
    """

    sense = Sense.MAXIMIZE
    dimensions = 3

    def __init__(self, dataset: Dataset):
        self.dataset = dataset

    def compute(self, params: np.ndarray) -> float:
        intercept, slope, sigma = params
        if not sigma > 0:
            raise DegenerateObjective(f"noise scale must be positive, got {sigma}")
        residuals = self.dataset.y - (intercept + slope * self.dataset.x)
        n = residuals.size
        rss = float(np.dot(residuals, residuals))
        return -0.5 * n * _LOG_2PI - n * math.log(sigma) - rss / (2.0 * sigma * sigma)

    def __repr__(self):
        return f"{type(self).__name__}(n={len(self.dataset)})"


class NegatedObjective(Objective):
    """Minimizing view of a maximizing objective: ``evaluate(p) == -inner.evaluate(p)``."""

    sense = Sense.MINIMIZE

    def __init__(self, inner: Objective):
        if inner.sense is not Sense.MAXIMIZE:
            raise ValueError("NegatedObjective expects a maximizing objective")
        self.inner = inner

    def compute(self, params: np.ndarray) -> float:
        return -self.inner.evaluate(params)

    def __repr__(self):
        return f"{type(self).__name__}({self.inner!r})"
