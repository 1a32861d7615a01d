"""
Tests for particles, the global-best cell and bounds handling.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from regression_mle.bounds import Bounds
from regression_mle.objective import Sense
from regression_mle.particle_swarm import GlobalBest, Particle, create_swarm, handle_bounds


def test_global_best_replaces_only_when_strictly_better():
    cell = GlobalBest()
    assert cell.cost == Sense.MINIMIZE.worst
    with pytest.raises(ValueError):
        cell.snapshot()

    assert cell.offer([1.0, 1.0], 5.0)
    assert not cell.offer([2.0, 2.0], 5.0)
    assert not cell.offer([3.0, 3.0], 6.0)
    assert cell.offer([4.0, 4.0], 4.0)
    position, cost = cell.snapshot()
    np.testing.assert_array_equal(position, [4.0, 4.0])
    assert cost == 4.0


def test_first_offer_accepted_even_if_degenerate():
    cell = GlobalBest()
    assert cell.offer([0.0], Sense.MINIMIZE.worst)
    assert cell.snapshot()[1] == Sense.MINIMIZE.worst


def test_snapshot_is_a_copy():
    cell = GlobalBest()
    source = np.array([1.0, 2.0])
    cell.offer(source, 1.0)
    source[0] = 99.0
    position, _ = cell.snapshot()
    position[1] = -1.0
    np.testing.assert_array_equal(cell.snapshot()[0], [1.0, 2.0])


def test_concurrent_offers_keep_the_minimum():
    cell = GlobalBest()
    rng = np.random.default_rng(0)
    costs = rng.uniform(-100.0, 100.0, size=2000)

    def offer(i):
        return cell.offer([float(i)], costs[i])

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(offer, range(len(costs))))

    position, cost = cell.snapshot()
    assert cost == costs.min()
    assert int(position[0]) == int(np.argmin(costs))


def test_maximizing_cell():
    cell = GlobalBest(Sense.MAXIMIZE)
    cell.offer([0.0], 1.0)
    assert cell.offer([1.0], 2.0)
    assert not cell.offer([2.0], 0.5)


def test_particle_personal_best():
    particle = Particle(position=[1.0, 2.0], velocity=[0.0, 0.0])
    assert particle.update_personal_best(3.0)
    particle.position = np.array([5.0, 5.0])
    assert not particle.update_personal_best(4.0)
    np.testing.assert_array_equal(particle.best_position, [1.0, 2.0])
    assert particle.cost == 4.0
    assert particle.best_cost == 3.0


def test_create_swarm_initial_state(bounds):
    swarm = create_swarm(25, bounds, np.random.default_rng(1), 0.1)
    assert len(swarm) == 25
    assert bounds.contains(swarm.positions)
    assert np.all(np.abs(swarm.velocities) <= 0.1 * bounds.span)
    for particle in swarm.particles:
        np.testing.assert_array_equal(particle.best_position, particle.position)


def test_zero_initial_velocity(bounds):
    swarm = create_swarm(5, bounds, np.random.default_rng(1), 0.0)
    assert np.all(swarm.velocities == 0.0)


@pytest.mark.parametrize("strategy, expected", [
    ("zero", [0.0, 3.0, 0.0]),
    ("invert", [-5.0, 3.0, 4.0]),
    ("unmodified", [5.0, 3.0, -4.0]),
])
def test_handle_bounds_strategies(strategy, expected):
    bounds = Bounds([0.0, 0.0, 0.0], [10.0, 10.0, 10.0])
    position = np.array([12.0, 5.0, -3.0])
    velocity = np.array([5.0, 3.0, -4.0])
    clamped = handle_bounds(position, velocity, bounds, strategy)
    np.testing.assert_array_equal(clamped, [True, False, True])
    np.testing.assert_array_equal(position, [10.0, 5.0, 0.0])
    np.testing.assert_array_equal(velocity, expected)


@settings(max_examples=100, deadline=None)
@given(
    st.lists(st.floats(min_value=-1e9, max_value=1e9), min_size=3, max_size=3),
    st.sampled_from(["zero", "invert", "unmodified"]),
)
def test_handle_bounds_always_contains(bounds, position, strategy):
    position = np.array(position)
    velocity = np.ones(3)
    handle_bounds(position, velocity, bounds, strategy)
    assert bounds.contains(position)
