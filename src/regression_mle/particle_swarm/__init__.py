"""
Global-best particle swarm driven by a seeded numpy random stream.
"""

from .global_best import GlobalBestPSO, handle_bounds, run_particle_swarm
from .swarm import GlobalBest, Particle, Swarm, create_swarm

__all__ = [
    'GlobalBestPSO',
    'run_particle_swarm',
    'handle_bounds',
    'GlobalBest',
    'Particle',
    'Swarm',
    'create_swarm',
]
