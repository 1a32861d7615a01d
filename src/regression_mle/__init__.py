"""
Maximum-likelihood recovery of simple linear-regression parameters with a
genetic algorithm and a particle swarm, compared against least squares.
"""

from .bounds import Bounds
from .comparison import Comparison, compare_estimators, comparison_table, run_comparison
from .config import DataConfig, GAConfig, PSOConfig, RecoveryConfig, load_config
from .dataset import Dataset, RegressionParameters, simulate_dataset
from .deap_optimizer import run_genetic_algorithm
from .errors import (
    ConfigurationError,
    DegenerateObjective,
    InvalidBounds,
    InvalidPopulationSize,
    InvalidSwarmSize,
    RegressionMLEError,
)
from .objective import GaussianLogLikelihood, NegatedObjective, Objective, Sense
from .ols import OLSFit, fit_ols
from .particle_swarm import run_particle_swarm
from .results import RunMetadata, SearchResult

__version__ = "0.1.0"

__all__ = [
    'Bounds',
    'Comparison',
    'compare_estimators',
    'comparison_table',
    'run_comparison',
    'DataConfig',
    'GAConfig',
    'PSOConfig',
    'RecoveryConfig',
    'load_config',
    'Dataset',
    'RegressionParameters',
    'simulate_dataset',
    'run_genetic_algorithm',
    'run_particle_swarm',
    'ConfigurationError',
    'DegenerateObjective',
    'InvalidBounds',
    'InvalidPopulationSize',
    'InvalidSwarmSize',
    'RegressionMLEError',
    'GaussianLogLikelihood',
    'NegatedObjective',
    'Objective',
    'Sense',
    'OLSFit',
    'fit_ols',
    'RunMetadata',
    'SearchResult',
]
