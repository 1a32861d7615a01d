r"""
A Global-best Particle Swarm Optimization (gbest PSO) algorithm.

It takes a set of candidate solutions, and tries to find the best
solution using a position-velocity update method. Uses a
star-topology where each particle is attracted to the best
performing particle.

The position update can be defined as:

.. math::

   x_{i}(t+1) = x_{i}(t) + v_{i}(t+1)

Where the position at the current timestep :math:`t` is updated using
the computed velocity at :math:`t+1`. Furthermore, the velocity update
is defined as:

.. math::

   v_{ij}(t + 1) = w * v_{ij}(t) + c_{1}r_{1j}(t)[y_{ij}(t) − x_{ij}(t)]
                   + c_{2}r_{2j}(t)[\hat{y}_{j}(t) − x_{ij}(t)]

Here, :math:`c1` and :math:`c2` are the cognitive and social parameters
respectively and :math:`w` controls the inertia of the swarm's movement.
The global best :math:`\hat{y}` used during iteration :math:`t` is the one
known at the end of iteration :math:`t - 1` (synchronous update).

Positions leaving the bounds are clamped onto the nearest bound; the
velocity component of a clamped coordinate is handled by
``velocity_strategy``.
"""

import logging
import time

import numpy as np

from ..bounds import Bounds
from ..convergence import StagnationTracker, population_diversity
from ..errors import ConfigurationError
from ..evaluation import Evaluator
from ..objective import Sense
from ..results import RunMetadata, SearchResult
from ..utils import (
    create_optimization_summary_panel,
    create_progress_bar,
    create_progress_display,
    log_message,
)
from .swarm import create_swarm

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "particle_swarm"


def handle_bounds(position, velocity, bounds, strategy):
    """
    Clamp ``position`` into ``bounds`` in place and adjust ``velocity``.

    Parameters
    ----------
    position, velocity : np.ndarray
        State of one particle, modified in place.
    bounds : Bounds
        Search space.
    strategy : str
        ``"zero"`` zeroes, ``"invert"`` negates and ``"unmodified"`` keeps
        the velocity component of every clamped coordinate.

    Returns
    -------
    np.ndarray
        Boolean mask of the clamped coordinates.
    """
    out_of_bounds = (position < bounds.lower) | (position > bounds.upper)
    if not out_of_bounds.any():
        return out_of_bounds
    np.clip(position, bounds.lower, bounds.upper, out=position)
    if strategy == "zero":
        velocity[out_of_bounds] = 0.0
    elif strategy == "invert":
        velocity[out_of_bounds] = -velocity[out_of_bounds]
    return out_of_bounds


class GlobalBestPSO:
    """
    Global-best PSO minimizing an ``Objective`` within box bounds.

    Attributes
    ----------
    bounds : Bounds
        Search space; every position stays inside it.
    config : PSOConfig
        Swarm size, iteration budget, seed, weights and velocity handling.
    n_processes : int or None
        Worker processes used to evaluate an iteration.
    console : rich.console.Console or None
        Progress output; ``None`` keeps the run silent.
    swarm : Swarm or None
        State of the last run.

    Examples
    --------
    >>> optimizer = GlobalBestPSO(bounds, pso_config)
    >>> result = optimizer.optimize(NegatedObjective(GaussianLogLikelihood(dataset)))
    """

    def __init__(self, bounds, config, n_processes=None, console=None, log_interval=100):
        if not isinstance(bounds, Bounds):
            bounds = Bounds(*bounds)
        config.validate()
        if config.n_particles == 1:
            logger.warning("Running a swarm of one particle; the social term has no effect")
        self.bounds = bounds
        self.config = config
        self.n_processes = n_processes
        self.console = console
        self.log_interval = log_interval
        self.swarm = None
        if config.velocity_clamp_fraction is not None:
            self.velocity_clamp = config.velocity_clamp_fraction * bounds.span
        else:
            self.velocity_clamp = None

    def _check_objective(self, objective):
        if objective.sense is not Sense.MINIMIZE:
            raise ConfigurationError(
                f"The particle swarm minimizes; got a {objective.sense.value} objective. "
                f"Wrap maximizing objectives in NegatedObjective."
            )
        dimensions = getattr(objective, "dimensions", None)
        if dimensions is None:
            dimensions = getattr(getattr(objective, "inner", None), "dimensions", None)
        if dimensions is not None and dimensions != self.bounds.dimensions:
            raise ConfigurationError(
                f"Objective expects {dimensions} parameters, bounds have {self.bounds.dimensions}"
            )

    def _move(self, particle, global_best_position, rng):
        cfg = self.config
        dims = self.bounds.dimensions
        r1 = rng.random(dims)
        r2 = rng.random(dims)

        cognitive = cfg.cognitive * r1 * (particle.best_position - particle.position)
        social = cfg.social * r2 * (global_best_position - particle.position)
        particle.velocity = cfg.inertia * particle.velocity + cognitive + social
        if self.velocity_clamp is not None:
            np.clip(particle.velocity, -self.velocity_clamp, self.velocity_clamp, out=particle.velocity)

        particle.position = particle.position + particle.velocity
        handle_bounds(particle.position, particle.velocity, self.bounds, cfg.velocity_strategy)

    def optimize(self, objective, history=None):
        """
        Run the swarm for ``config.max_iterations`` iterations.

        Parameters
        ----------
        objective : Objective
            Minimizing objective, e.g. ``NegatedObjective(GaussianLogLikelihood(...))``.
        history : HistoryTracker, optional
            Receives one record per iteration, including the initial swarm
            as iteration 0.

        Returns
        -------
        SearchResult
            Global best at the end of the run.
        """
        self._check_objective(objective)
        cfg = self.config
        rng = np.random.default_rng(cfg.seed)
        tracker = StagnationTracker(Sense.MINIMIZE, cfg.stagnation_window, cfg.stagnation_tolerance)

        start_time = time.time()
        log_message(
            self.console,
            f"Particles: {cfg.n_particles} | Iterations: {cfg.max_iterations} | Seed: {cfg.seed} | "
            f"w: {cfg.inertia} | c1: {cfg.cognitive} | c2: {cfg.social}",
            emoji="🐝",
            panel=True,
            title="Particle Swarm",
        )

        with Evaluator(objective, self.n_processes) as evaluator:
            iter_start = time.time()
            swarm = create_swarm(cfg.n_particles, self.bounds, rng, cfg.initial_velocity_fraction)
            self.swarm = swarm
            for particle, cost in zip(swarm.particles, evaluator.evaluate(swarm.positions)):
                particle.update_personal_best(cost)
            swarm.offer_personal_bests()
            diversity = self._record(0, swarm, tracker, history, iter_start)

            progress = create_progress_bar(self.console) if self.console is not None else None
            if progress is not None:
                progress.start()
                task = progress.add_task("🐝 Swarming...", total=cfg.max_iterations)
            try:
                for iteration in range(1, cfg.max_iterations + 1):
                    iter_start = time.time()
                    global_best_position, _ = swarm.global_best.snapshot()

                    for particle in swarm.particles:
                        self._move(particle, global_best_position, rng)

                    costs = evaluator.evaluate(swarm.positions)
                    for particle, cost in zip(swarm.particles, costs):
                        particle.update_personal_best(cost)
                    swarm.offer_personal_bests()

                    diversity = self._record(iteration, swarm, tracker, history, iter_start)

                    if progress is not None:
                        progress.update(task, advance=1)
                        if iteration % self.log_interval == 0:
                            progress.console.print(create_progress_display(
                                "Iteration", iteration, len(swarm), swarm.global_best.cost,
                                diversity=diversity,
                            ))
            finally:
                if progress is not None:
                    progress.stop()

            evaluations = evaluator.evaluations
            degenerate = evaluator.degenerate_evaluations

        best_position, best_cost = swarm.global_best.snapshot()
        metadata = RunMetadata(
            algorithm=ALGORITHM_NAME,
            seed=cfg.seed,
            iterations=cfg.max_iterations,
            evaluations=evaluations,
            degenerate_evaluations=degenerate,
            best_history=tuple(tracker.best_history),
            converged=tracker.converged,
            iterations_since_improvement=tracker.iterations_since_improvement,
            final_diversity=diversity,
            elapsed_seconds=time.time() - start_time,
        )
        result = SearchResult.build(best_position, best_cost, Sense.MINIMIZE, metadata)

        if degenerate:
            logger.debug("%d of %d evaluations were degenerate", degenerate, evaluations)
        if self.console is not None:
            self.console.print(create_optimization_summary_panel(
                result, self.bounds.names, title="Particle Swarm Complete"
            ))
        return result

    def _record(self, iteration, swarm, tracker, history, iter_start):
        best_position, best_cost = swarm.global_best.snapshot()
        tracker.update(best_cost)
        positions = swarm.positions
        diversity = population_diversity(positions, self.bounds)
        if history is not None:
            history.record_generation(
                iteration,
                positions,
                swarm.costs,
                best_position,
                best_cost,
                diversity,
                time.time() - iter_start,
            )
        return diversity


def run_particle_swarm(objective, bounds, config, n_processes=None, history=None, console=None):
    """
    Minimize ``objective`` within ``bounds`` with the global-best PSO.

    Parameters
    ----------
    objective : Objective
        Minimizing objective; wrap a log-likelihood in ``NegatedObjective``.
    bounds : Bounds
        Search space.
    config : PSOConfig
        Swarm size, iteration budget, seed, weights and velocity handling.
    n_processes : int, optional
        Worker processes for evaluation; ``None`` evaluates in-process.
    history : HistoryTracker, optional
        Per-iteration record of the run.
    console : rich.console.Console, optional
        Progress output.

    Returns
    -------
    SearchResult
        ``value`` is the minimized cost; ``fitness`` reports it un-negated.

    Raises
    ------
    InvalidSwarmSize
        If ``config.n_particles < 1``; raised before any random draw.
    ConfigurationError
        If the objective maximizes or any other setting is invalid.
    """
    optimizer = GlobalBestPSO(bounds, config, n_processes=n_processes, console=console)
    return optimizer.optimize(objective, history=history)
