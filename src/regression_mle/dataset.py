"""
Synthetic data for the simple linear regression model.

    y_i = intercept + slope * x_i + e_i,   e_i ~ N(0, sigma^2)

Predictors are drawn uniformly on ``[x_low, x_high]``.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import ConfigurationError

PARAMETER_NAMES = ("intercept", "slope", "sigma")


@dataclass(frozen=True)
class RegressionParameters:
    """Intercept, slope and noise scale of the linear model."""
    intercept: float
    slope: float
    sigma: float

    @staticmethod
    def names() -> Tuple[str, ...]:
        return PARAMETER_NAMES

    def as_vector(self) -> np.ndarray:
        return np.array([self.intercept, self.slope, self.sigma], dtype=np.float64)

    @classmethod
    def from_vector(cls, vector) -> "RegressionParameters":
        intercept, slope, sigma = (float(v) for v in vector)
        return cls(intercept=intercept, slope=slope, sigma=sigma)


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered (predictor, response) pairs, stored as read-only arrays."""
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        x = np.array(self.x, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)
        if x.ndim != 1 or x.shape != y.shape:
            raise ConfigurationError(
                f"Predictor and response must be 1-D arrays of equal length, "
                f"got shapes {x.shape} and {y.shape}"
            )
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self):
        return int(self.x.size)

    def __iter__(self):
        return zip(self.x.tolist(), self.y.tolist())


def simulate_dataset(
    params: RegressionParameters,
    n: int,
    x_low: float,
    x_high: float,
    seed: int,
) -> Dataset:
    """
    Draw ``n`` observations from the linear model.

    Parameters
    ----------
    params : RegressionParameters
        Ground truth used to generate the responses.
    n : int
        Number of observations (at least 2).
    x_low, x_high : float
        Range of the uniform predictor distribution.
    seed : int
        Seed of the generator; identical seeds give identical datasets.

    Returns
    -------
    Dataset
    """
    if n < 2:
        raise ConfigurationError(f"n must be >= 2, got {n}")
    if not x_low < x_high:
        raise ConfigurationError(f"x_low ({x_low}) must be below x_high ({x_high})")
    if not params.sigma > 0:
        raise ConfigurationError(f"sigma must be positive, got {params.sigma}")

    rng = np.random.default_rng(seed)
    x = rng.uniform(x_low, x_high, size=n)
    y = rng.normal(params.intercept + params.slope * x, params.sigma)
    return Dataset(x=x, y=y)
