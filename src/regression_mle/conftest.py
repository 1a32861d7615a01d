"""
Shared fixtures for the regression_mle test modules.
"""

import math

import pytest

from regression_mle.bounds import Bounds
from regression_mle.comparison import simulate_representative_dataset
from regression_mle.config import GAConfig, PSOConfig
from regression_mle.dataset import RegressionParameters, simulate_dataset
from regression_mle.objective import GaussianLogLikelihood, NegatedObjective

TRUE_INTERCEPT = 1.345
TRUE_SLOPE = 4.876
TRUE_SIGMA = math.sqrt(273)


@pytest.fixture(scope="session")
def truth():
    return RegressionParameters(TRUE_INTERCEPT, TRUE_SLOPE, TRUE_SIGMA)


@pytest.fixture(scope="session")
def small_dataset(truth):
    return simulate_dataset(truth, n=200, x_low=12.5, x_high=120.29, seed=7)


@pytest.fixture(scope="session")
def recovery_dataset(truth):
    """
    A 1000-point dataset whose least-squares fit sits near the truth, so
    that an optimizer reaching the likelihood maximum also lands within the
    recovery tolerances.
    """
    dataset, _ = simulate_representative_dataset(truth, n=1000, x_low=12.5, x_high=120.29, seed=0)
    return dataset


@pytest.fixture(scope="session")
def log_likelihood(small_dataset):
    return GaussianLogLikelihood(small_dataset)


@pytest.fixture(scope="session")
def negated_log_likelihood(log_likelihood):
    return NegatedObjective(log_likelihood)


@pytest.fixture(scope="session")
def bounds():
    return Bounds.from_mapping({
        "intercept": (-20.0, 20.0),
        "slope": (-10.0, 10.0),
        "sigma": (0.0, 50.0),
    })


def make_ga_config(**overrides):
    settings = dict(
        population_size=20,
        max_generations=15,
        seed=11,
        crossover_prob=0.9,
        mutation_prob=0.3,
        gene_mutation_prob=1.0 / 3.0,
        eta=20.0,
        tournament_size=3,
    )
    settings.update(overrides)
    return GAConfig(**settings)


def make_pso_config(**overrides):
    settings = dict(
        n_particles=10,
        max_iterations=20,
        seed=13,
        inertia=0.7298,
        cognitive=1.49618,
        social=1.49618,
        initial_velocity_fraction=0.1,
        velocity_clamp_fraction=0.5,
        velocity_strategy="zero",
    )
    settings.update(overrides)
    return PSOConfig(**settings)


@pytest.fixture
def ga_config():
    return make_ga_config()


@pytest.fixture
def pso_config():
    return make_pso_config()


@pytest.fixture
def make_ga():
    return make_ga_config


@pytest.fixture
def make_pso():
    return make_pso_config
