"""
Box bounds of the search space.

Both optimizers search the same hyper-rectangle. Bounds are validated once,
before any random number is drawn, and stay immutable for the whole search.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidBounds


def _readonly(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Bounds:
    """
    Per-dimension lower/upper bounds.

    Attributes
    ----------
    lower : numpy.ndarray
        Read-only lower bounds, shape ``(dimensions,)``.
    upper : numpy.ndarray
        Read-only upper bounds, shape ``(dimensions,)``.
    names : tuple of str
        Parameter names, used for reporting only.
    """
    lower: np.ndarray
    upper: np.ndarray
    names: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        lower = np.asarray(self.lower, dtype=np.float64)
        upper = np.asarray(self.upper, dtype=np.float64)

        if lower.ndim != 1 or upper.ndim != 1:
            raise InvalidBounds("Bounds must be one-dimensional sequences")
        if lower.size == 0:
            raise InvalidBounds("Bounds cannot be empty")
        if lower.shape != upper.shape:
            raise InvalidBounds(
                f"Lower bounds have {lower.size} dimensions, upper bounds have {upper.size}"
            )
        if not (np.all(np.isfinite(lower)) and np.all(np.isfinite(upper))):
            raise InvalidBounds("Bounds must be finite")

        inverted = np.nonzero(lower > upper)[0]
        if inverted.size:
            i = int(inverted[0])
            label = self.names[i] if i < len(self.names) else f"dimension {i}"
            raise InvalidBounds(
                f"Invalid bounds for {label}: lower ({lower[i]}) > upper ({upper[i]})"
            )

        names = tuple(self.names) if self.names else tuple(f"x{i}" for i in range(lower.size))
        if len(names) != lower.size:
            raise InvalidBounds(
                f"Got {len(names)} parameter names for {lower.size} dimensions"
            )

        object.__setattr__(self, "lower", _readonly(lower))
        object.__setattr__(self, "upper", _readonly(upper))
        object.__setattr__(self, "names", names)

    @classmethod
    def from_mapping(cls, parameter_bounds: Mapping[str, Sequence[float]]) -> "Bounds":
        """Build bounds from an ordered ``{name: (low, high)}`` mapping."""
        if not parameter_bounds:
            raise InvalidBounds("parameter_bounds cannot be empty")
        names = tuple(parameter_bounds.keys())
        try:
            lows, highs = zip(*(tuple(b) for b in parameter_bounds.values()))
        except (TypeError, ValueError) as exc:
            raise InvalidBounds(f"Each bound must be a (low, high) pair: {exc}") from exc
        return cls(lower=lows, upper=highs, names=names)

    @property
    def dimensions(self) -> int:
        return int(self.lower.size)

    @property
    def span(self) -> np.ndarray:
        return self.upper - self.lower

    @property
    def fixed_mask(self) -> np.ndarray:
        """True for dimensions whose lower and upper bounds coincide."""
        return self.lower == self.upper

    def as_dict(self) -> Dict[str, Tuple[float, float]]:
        return {
            name: (float(lo), float(hi))
            for name, lo, hi in zip(self.names, self.lower, self.upper)
        }

    def check_vector(self, vector, what: str = "vector") -> np.ndarray:
        """Return ``vector`` as a float array, raising if its length differs."""
        array = np.asarray(vector, dtype=np.float64)
        if array.shape[-1:] != (self.dimensions,):
            raise InvalidBounds(
                f"{what} has shape {array.shape}, expected last dimension {self.dimensions}"
            )
        return array

    def contains(self, positions) -> bool:
        """True if every component of every position lies within the bounds."""
        array = self.check_vector(positions, "positions")
        return bool(np.all(array >= self.lower) and np.all(array <= self.upper))

    def clip(self, positions, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Clamp each component to the nearest bound."""
        return np.clip(self.check_vector(positions, "positions"), self.lower, self.upper, out=out)

    def sample(self, rng: np.random.Generator, n: int) -> np.ndarray:
        """Draw ``n`` positions uniformly within the bounds, shape ``(n, dimensions)``."""
        return rng.uniform(self.lower, self.upper, size=(n, self.dimensions))
