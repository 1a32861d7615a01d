"""
Genetic algorithm built on DEAP containers and a seeded numpy random stream.
"""

from .evolutionary_algorithm import DEAPEvolutionaryAlgorithm, run_genetic_algorithm
from .operators import (
    create_toolbox,
    cx_simulated_binary_bounded,
    mut_polynomial_bounded,
    sel_tournament,
)

__all__ = [
    'DEAPEvolutionaryAlgorithm',
    'run_genetic_algorithm',
    'create_toolbox',
    'cx_simulated_binary_bounded',
    'mut_polynomial_bounded',
    'sel_tournament',
]
