"""
Elitist genetic algorithm on DEAP containers.

This module provides the DEAPEvolutionaryAlgorithm class that runs a
generational GA (tournament selection, SBX crossover, polynomial mutation,
one elite) maximizing an ``Objective`` within box bounds.
"""

import logging
import time

import numpy as np
from deap import tools

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
from .operators import create_toolbox, var_and

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "genetic_algorithm"


def _finite_mean(values):
    values = np.asarray(values, dtype=np.float64)
    finite = values[np.abs(values) < np.finfo(np.float64).max]
    return float(np.mean(finite)) if finite.size else float("nan")


def create_statistics():
    """Fitness statistics recorded into the logbook each generation."""
    stats = tools.Statistics(key=lambda ind: ind.fitness.values[0])
    stats.register("max", np.max)
    stats.register("mean", _finite_mean)
    stats.register("min", np.min)
    return stats


class DEAPEvolutionaryAlgorithm:
    """
    Generational GA with elitism.

    Attributes
    ----------
    bounds : Bounds
        Search space; every individual stays inside it.
    config : GAConfig
        Population size, generation budget, seed and operator settings.
    n_processes : int or None
        Worker processes used to evaluate a generation.
    console : rich.console.Console or None
        Progress output; ``None`` keeps the run silent.
    logbook : deap.tools.Logbook
        Per-generation statistics of the last run.

    Examples
    --------
    >>> optimizer = DEAPEvolutionaryAlgorithm(bounds, ga_config)
    >>> result = optimizer.optimize(GaussianLogLikelihood(dataset))
    >>> result.position, result.value
    """

    def __init__(self, bounds, config, n_processes=None, console=None, log_interval=100):
        if not isinstance(bounds, Bounds):
            bounds = Bounds(*bounds)
        config.validate()
        self.bounds = bounds
        self.config = config
        self.n_processes = n_processes
        self.console = console
        self.log_interval = log_interval
        self.logbook = None

    def _check_objective(self, objective):
        if objective.sense is not Sense.MAXIMIZE:
            raise ConfigurationError(
                f"The genetic algorithm maximizes; got a {objective.sense.value} objective"
            )
        dimensions = getattr(objective, "dimensions", None)
        if dimensions is not None and dimensions != self.bounds.dimensions:
            raise ConfigurationError(
                f"Objective expects {dimensions} parameters, bounds have {self.bounds.dimensions}"
            )

    @staticmethod
    def _assign(individuals, evaluator):
        values = evaluator.evaluate([list(ind) for ind in individuals])
        for ind, value in zip(individuals, values):
            ind.fitness.values = (float(value),)
        return len(individuals)

    def optimize(self, objective, history=None):
        """
        Run the GA for ``config.max_generations`` generations.

        Parameters
        ----------
        objective : Objective
            Maximizing objective.
        history : HistoryTracker, optional
            Receives one record per generation, including generation 0.

        Returns
        -------
        SearchResult
            Best individual seen during the whole run.
        """
        self._check_objective(objective)
        cfg = self.config
        rng = np.random.default_rng(cfg.seed)
        toolbox = create_toolbox(self.bounds, cfg, rng)

        stats = create_statistics()
        halloffame = tools.HallOfFame(1)
        tracker = StagnationTracker(Sense.MAXIMIZE, cfg.stagnation_window, cfg.stagnation_tolerance)
        self.logbook = tools.Logbook()
        self.logbook.header = ["gen", "nevals"] + stats.fields

        start_time = time.time()
        log_message(
            self.console,
            f"Population: {cfg.population_size} | Generations: {cfg.max_generations} | "
            f"Seed: {cfg.seed} | cxpb: {cfg.crossover_prob} | mutpb: {cfg.mutation_prob}",
            emoji="🧬",
            panel=True,
            title="Genetic Algorithm",
        )

        with Evaluator(objective, self.n_processes) as evaluator:
            gen_start = time.time()
            population = toolbox.population(n=cfg.population_size)
            nevals = self._assign(population, evaluator)
            diversity = self._record(0, population, nevals, stats, halloffame, tracker,
                                     history, gen_start)

            progress = create_progress_bar(self.console) if self.console is not None else None
            if progress is not None:
                progress.start()
                task = progress.add_task("🧬 Evolving...", total=cfg.max_generations)
            try:
                for gen in range(1, cfg.max_generations + 1):
                    gen_start = time.time()
                    elite = toolbox.clone(tools.selBest(population, 1)[0])

                    offspring = toolbox.select(population, len(population))
                    offspring = var_and(offspring, toolbox, rng, cfg.crossover_prob, cfg.mutation_prob)

                    invalid_ind = [ind for ind in offspring if not ind.fitness.valid]
                    nevals = self._assign(invalid_ind, evaluator) if invalid_ind else 0

                    # the elite replaces the worst offspring
                    worst = min(range(len(offspring)), key=lambda i: offspring[i].fitness)
                    offspring[worst] = elite
                    population[:] = offspring

                    diversity = self._record(gen, population, nevals, stats, halloffame,
                                             tracker, history, gen_start)

                    if progress is not None:
                        progress.update(task, advance=1)
                        if gen % self.log_interval == 0:
                            record = self.logbook[-1]
                            progress.console.print(create_progress_display(
                                "Generation", gen, len(population), record["max"],
                                record["mean"], diversity,
                            ))
            finally:
                if progress is not None:
                    progress.stop()

            evaluations = evaluator.evaluations
            degenerate = evaluator.degenerate_evaluations

        best = halloffame[0]
        metadata = RunMetadata(
            algorithm=ALGORITHM_NAME,
            seed=cfg.seed,
            iterations=cfg.max_generations,
            evaluations=evaluations,
            degenerate_evaluations=degenerate,
            best_history=tuple(tracker.best_history),
            converged=tracker.converged,
            iterations_since_improvement=tracker.iterations_since_improvement,
            final_diversity=diversity,
            elapsed_seconds=time.time() - start_time,
        )
        result = SearchResult.build(list(best), best.fitness.values[0], Sense.MAXIMIZE, metadata)

        if degenerate:
            logger.debug("%d of %d evaluations were degenerate", degenerate, evaluations)
        if self.console is not None:
            self.console.print(create_optimization_summary_panel(
                result, self.bounds.names, title="Genetic Algorithm Complete"
            ))
        return result

    def _record(self, gen, population, nevals, stats, halloffame, tracker, history, gen_start):
        halloffame.update(population)
        tracker.update(halloffame[0].fitness.values[0])
        self.logbook.record(gen=gen, nevals=nevals, **stats.compile(population))

        positions = np.array([list(ind) for ind in population], dtype=np.float64)
        diversity = population_diversity(positions, self.bounds)
        if history is not None:
            history.record_generation(
                gen,
                positions,
                [ind.fitness.values[0] for ind in population],
                halloffame[0],
                halloffame[0].fitness.values[0],
                diversity,
                time.time() - gen_start,
            )
        return diversity


def run_genetic_algorithm(objective, bounds, config, n_processes=None, history=None,
                          console=None):
    """
    Maximize ``objective`` within ``bounds`` with the genetic algorithm.

    Parameters
    ----------
    objective : Objective
        Maximizing objective, e.g. ``GaussianLogLikelihood``.
    bounds : Bounds
        Search space.
    config : GAConfig
        Population size, generation budget, seed and operator settings.
    n_processes : int, optional
        Worker processes for evaluation; ``None`` evaluates in-process.
    history : HistoryTracker, optional
        Per-generation record of the run.
    console : rich.console.Console, optional
        Progress output.

    Returns
    -------
    SearchResult

    Raises
    ------
    InvalidPopulationSize
        If ``config.population_size < 2``; raised before any random draw.
    ConfigurationError
        If the objective minimizes or any other setting is invalid.
    """
    optimizer = DEAPEvolutionaryAlgorithm(bounds, config, n_processes=n_processes, console=console)
    return optimizer.optimize(objective, history=history)
