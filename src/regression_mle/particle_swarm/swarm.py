"""
Swarm state: particles and the shared global-best cell.
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..objective import Sense


@dataclass
class Particle:
    """
    One member of a minimizing swarm, mutated in place by the optimizer.

    ``best_position``/``best_cost`` are the personal best seen so far.
    """
    position: np.ndarray
    velocity: np.ndarray
    cost: float = Sense.MINIMIZE.worst
    best_position: Optional[np.ndarray] = None
    best_cost: float = Sense.MINIMIZE.worst

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)
        self.velocity = np.array(self.velocity, dtype=np.float64)
        if self.best_position is None:
            self.best_position = self.position.copy()

    def update_personal_best(self, cost: float) -> bool:
        """Record ``cost`` for the current position; True if the personal best improved."""
        self.cost = float(cost)
        if self.cost < self.best_cost:
            self.best_cost = self.cost
            self.best_position = self.position.copy()
            return True
        return False


class GlobalBest:
    """
    Best position found by any particle.

    The only state shared across particles. Reads and the
    compare-and-replace in ``offer`` happen under one lock, so concurrent
    offers keep the best of all of them.
    """

    def __init__(self, sense=Sense.MINIMIZE):
        self.sense = Sense(sense)
        self._lock = threading.Lock()
        self._position = None
        self._cost = self.sense.worst

    def offer(self, position, cost) -> bool:
        """Replace the stored best if ``cost`` is strictly better; True if replaced."""
        cost = float(cost)
        with self._lock:
            if self._position is not None and not self.sense.better(cost, self._cost):
                return False
            self._position = np.array(position, dtype=np.float64)
            self._cost = cost
            return True

    def snapshot(self) -> Tuple[np.ndarray, float]:
        """Consistent copy of ``(position, cost)``."""
        with self._lock:
            if self._position is None:
                raise ValueError("No position has been offered yet")
            return self._position.copy(), self._cost

    @property
    def cost(self) -> float:
        with self._lock:
            return self._cost


@dataclass
class Swarm:
    """Fixed-size list of particles plus the global-best cell."""
    particles: List[Particle]
    global_best: GlobalBest = field(default_factory=GlobalBest)

    def __len__(self):
        return len(self.particles)

    @property
    def positions(self) -> np.ndarray:
        return np.array([p.position for p in self.particles])

    @property
    def velocities(self) -> np.ndarray:
        return np.array([p.velocity for p in self.particles])

    @property
    def costs(self) -> np.ndarray:
        return np.array([p.cost for p in self.particles], dtype=np.float64)

    def offer_personal_bests(self) -> bool:
        """Offer every personal best to the global best, in particle order."""
        improved = False
        for particle in self.particles:
            improved |= self.global_best.offer(particle.best_position, particle.best_cost)
        return improved


def create_swarm(n_particles, bounds, rng, initial_velocity_fraction) -> Swarm:
    """
    Particles with uniform positions inside ``bounds`` and velocities
    uniform in ``±initial_velocity_fraction * span``.
    """
    positions = bounds.sample(rng, n_particles)
    v_max = initial_velocity_fraction * bounds.span
    velocities = rng.uniform(-v_max, v_max, size=(n_particles, bounds.dimensions))
    return Swarm([Particle(position=p, velocity=v) for p, v in zip(positions, velocities)])
