"""
Property-based tests for the genetic operators.

Testing Framework: pytest + Hypothesis
"""

import numpy as np
import pytest
from deap import creator
from hypothesis import given, settings, strategies as st

from regression_mle.bounds import Bounds
from regression_mle.deap_optimizer.operators import (
    create_toolbox,
    cx_simulated_binary_bounded,
    mut_polynomial_bounded,
    sel_tournament,
    var_and,
)

LOW = [-20.0, -10.0, 0.0, 3.0]
UP = [20.0, 10.0, 50.0, 3.0]
BOUNDS = Bounds(LOW, UP)


def _individual(rng):
    return creator.Individual(BOUNDS.sample(rng, 1)[0].tolist())


def _within(ind):
    return all(lo <= v <= hi for v, lo, hi in zip(ind, LOW, UP))


@settings(max_examples=200, deadline=None)
@given(
    seed=st.integers(min_value=0, max_value=2**32 - 1),
    eta=st.floats(min_value=0.0, max_value=100.0),
)
def test_crossover_children_within_bounds(seed, eta):
    rng = np.random.default_rng(seed)
    ind1, ind2 = _individual(rng), _individual(rng)
    child1, child2 = cx_simulated_binary_bounded(ind1, ind2, rng, eta, LOW, UP)
    assert child1 is ind1 and child2 is ind2
    assert _within(child1) and _within(child2)
    assert child1[3] == 3.0 and child2[3] == 3.0


@settings(max_examples=200, deadline=None)
@given(
    seed=st.integers(min_value=0, max_value=2**32 - 1),
    eta=st.floats(min_value=0.0, max_value=100.0),
    indpb=st.floats(min_value=0.0, max_value=1.0),
)
def test_mutation_within_bounds(seed, eta, indpb):
    rng = np.random.default_rng(seed)
    ind = _individual(rng)
    mutant, = mut_polynomial_bounded(ind, rng, eta, LOW, UP, indpb)
    assert mutant is ind
    assert _within(mutant)
    assert mutant[3] == 3.0


def test_mutation_probability_zero_leaves_individual():
    rng = np.random.default_rng(0)
    ind = _individual(rng)
    before = list(ind)
    mut_polynomial_bounded(ind, rng, 20.0, LOW, UP, 0.0)
    assert list(ind) == before


def test_crossover_of_identical_parents_is_identity():
    rng = np.random.default_rng(1)
    ind1 = creator.Individual([1.0, 2.0, 3.0, 3.0])
    ind2 = creator.Individual([1.0, 2.0, 3.0, 3.0])
    cx_simulated_binary_bounded(ind1, ind2, rng, 20.0, LOW, UP)
    assert list(ind1) == list(ind2) == [1.0, 2.0, 3.0, 3.0]


def test_tournament_prefers_fitter_individuals():
    rng = np.random.default_rng(2)
    population = [creator.Individual([float(i)]) for i in range(5)]
    for i, ind in enumerate(population):
        ind.fitness.values = (float(i),)

    chosen = sel_tournament(population, 5000, rng, tournsize=3)
    counts = np.bincount([int(ind[0]) for ind in chosen], minlength=5)
    assert all(counts[i] <= counts[i + 1] for i in range(4))


def test_tournament_returns_population_members():
    rng = np.random.default_rng(3)
    population = [creator.Individual([0.0]), creator.Individual([1.0])]
    population[0].fitness.values = (-5.0,)
    population[1].fitness.values = (5.0,)
    chosen = sel_tournament(population, 10, rng, tournsize=1)
    assert len(chosen) == 10
    assert all(ind in population for ind in chosen)


def test_toolbox_population_and_variation(make_ga):
    config = make_ga(crossover_prob=1.0, mutation_prob=1.0, gene_mutation_prob=1.0)
    rng = np.random.default_rng(4)
    toolbox = create_toolbox(BOUNDS, config, rng)
    population = toolbox.population(n=10)
    assert len(population) == 10
    assert all(_within(ind) for ind in population)
    for ind in population:
        ind.fitness.values = (0.0,)

    offspring = var_and(population, toolbox, rng, config.crossover_prob, config.mutation_prob)
    assert len(offspring) == 10
    assert all(not ind.fitness.valid for ind in offspring)
    assert all(ind.fitness.valid for ind in population)
    assert all(_within(ind) for ind in offspring)


def test_same_stream_same_offspring(make_ga):
    config = make_ga()

    def run(seed):
        rng = np.random.default_rng(seed)
        toolbox = create_toolbox(BOUNDS, config, rng)
        population = toolbox.population(n=8)
        for ind in population:
            ind.fitness.values = (sum(ind),)
        parents = toolbox.select(population, len(population))
        return [list(ind) for ind in var_and(parents, toolbox, rng, 0.9, 0.5)]

    assert run(9) == run(9)
    assert run(9) != run(10)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
