"""
Side-by-side recovery of the regression parameters by OLS, GA and PSO.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .dataset import PARAMETER_NAMES, Dataset, RegressionParameters, simulate_dataset
from .deap_optimizer import run_genetic_algorithm
from .errors import ConfigurationError
from .history import HistoryTracker
from .objective import GaussianLogLikelihood, NegatedObjective
from .ols import OLSFit, fit_ols
from .particle_swarm import run_particle_swarm
from .results import SearchResult
from .utils import create_stage_rule, log_message

logger = logging.getLogger(__name__)

COLUMNS = ("true", "ols", "ga", "pso")
LOG_LIKELIHOOD_ROW = "log_likelihood"
REPRESENTATIVE_TOLERANCES = (0.25, 0.05, 1.0)


@dataclass(frozen=True)
class Comparison:
    """Estimates of every method on one dataset, plus the aligned table."""
    dataset: Dataset
    truth: RegressionParameters
    ols: OLSFit
    ga: SearchResult
    pso: SearchResult
    table: pd.DataFrame

    def errors(self) -> pd.DataFrame:
        """Absolute deviation of each estimate from the truth."""
        params = self.table.loc[list(PARAMETER_NAMES)]
        return params[["ols", "ga", "pso"]].sub(params["true"], axis=0).abs()


def simulate_representative_dataset(truth, n, x_low, x_high, seed, max_attempts=200,
                                    tolerances=REPRESENTATIVE_TOLERANCES):
    """
    Simulate with ``seed``, ``seed + 1``, ... until the least-squares fit of
    the sample lies within ``tolerances`` of the truth.

    Parameters
    ----------
    truth : RegressionParameters
        Parameters the data is drawn from.
    n, x_low, x_high : int, float, float
        Sampling design, as in ``simulate_dataset``.
    seed : int
        First seed tried.
    max_attempts : int
        Seeds tried before giving up.
    tolerances : tuple of float
        Allowed absolute deviation of the OLS intercept, slope and
        maximum-likelihood sigma.

    Returns
    -------
    tuple
        ``(dataset, seed)`` of the first representative sample.

    Raises
    ------
    ConfigurationError
        If none of the ``max_attempts`` seeds qualifies.
    """
    for candidate in range(seed, seed + max_attempts):
        dataset = simulate_dataset(truth, n, x_low, x_high, candidate)
        fit = fit_ols(dataset)
        deviations = (abs(fit.intercept - truth.intercept), abs(fit.slope - truth.slope),
                      abs(fit.sigma_mle - truth.sigma))
        if all(d < tol for d, tol in zip(deviations, tolerances)):
            if candidate != seed:
                logger.info("Seed %d gave a representative sample (started at %d)", candidate, seed)
            return dataset, candidate
    raise ConfigurationError(
        f"No seed in [{seed}, {seed + max_attempts}) gave a sample within {tolerances} of the truth"
    )


def _validate_inputs(bounds, ga_config, pso_config):
    ga_config.validate()
    pso_config.validate()
    if bounds.dimensions != GaussianLogLikelihood.dimensions:
        raise ConfigurationError(
            f"Bounds have {bounds.dimensions} dimensions, the log-likelihood takes "
            f"{GaussianLogLikelihood.dimensions}"
        )


def comparison_table(truth, ols, ga, pso, objective) -> pd.DataFrame:
    """
    Align the estimates into one frame.

    Parameters
    ----------
    truth : RegressionParameters
        Parameters the data was drawn from.
    ols : OLSFit
        Closed-form fit; its sigma is the residual standard error.
    ga : SearchResult
        Result of the maximizing GA.
    pso : SearchResult
        Result of the minimizing PSO.
    objective : GaussianLogLikelihood
        Log-likelihood used to score the ``true`` and ``ols`` columns.

    Returns
    -------
    pandas.DataFrame
        Index ``intercept, slope, sigma, log_likelihood``; columns
        ``true, ols, ga, pso``. Log-likelihoods are all in the maximizing
        convention, each evaluated at its own column's parameters.
    """
    ols_params = ols.as_parameters()
    columns = {
        "true": list(truth.as_vector()) + [objective.evaluate(truth.as_vector())],
        "ols": list(ols_params.as_vector()) + [objective.evaluate(ols_params.as_vector())],
        "ga": list(ga.position) + [ga.fitness],
        "pso": list(pso.position) + [pso.fitness],
    }
    index = pd.Index(list(PARAMETER_NAMES) + [LOG_LIKELIHOOD_ROW], name="parameter")
    return pd.DataFrame(columns, index=index, columns=list(COLUMNS))


def compare_estimators(dataset, truth, bounds, ga_config, pso_config, n_processes=None,
                       console=None, history_dir=None) -> Comparison:
    """
    Run OLS, the GA on the log-likelihood and the PSO on its negation.

    Parameters
    ----------
    dataset : Dataset
        Observations shared by all three methods.
    truth : RegressionParameters
        Used only for the ``true`` column.
    bounds : Bounds
        Search space of both optimizers.
    ga_config, pso_config : GAConfig, PSOConfig
        Optimizer settings.
    n_processes : int, optional
        Worker processes used by the optimizers.
    console : rich.console.Console, optional
        Progress output.
    history_dir : str, optional
        If given, per-generation histories are pickled there as
        ``ga_history.pkl`` and ``pso_history.pkl``.

    Returns
    -------
    Comparison
    """
    _validate_inputs(bounds, ga_config, pso_config)
    objective = GaussianLogLikelihood(dataset)

    if console is not None:
        console.print(create_stage_rule("📐 Ordinary least squares"))
    ols = fit_ols(dataset)
    log_message(console, f"OLS: intercept={ols.intercept:.4f} slope={ols.slope:.4f} "
                         f"sigma={ols.residual_std_error:.4f}", emoji="📐")

    ga_history = pso_history = None
    if history_dir is not None:
        ga_history = HistoryTracker("genetic_algorithm", objective.sense, bounds.names,
                                    os.path.join(history_dir, "ga_history.pkl"))
        pso_history = HistoryTracker("particle_swarm", NegatedObjective.sense, bounds.names,
                                     os.path.join(history_dir, "pso_history.pkl"))

    if console is not None:
        console.print(create_stage_rule("🧬 Genetic algorithm"))
    ga = run_genetic_algorithm(objective, bounds, ga_config, n_processes=n_processes,
                               history=ga_history, console=console)

    if console is not None:
        console.print(create_stage_rule("🐝 Particle swarm"))
    pso = run_particle_swarm(NegatedObjective(objective), bounds, pso_config,
                             n_processes=n_processes, history=pso_history, console=console)

    for history in (ga_history, pso_history):
        if history is not None:
            path = history.save_to_file()
            log_message(console, f"History saved to {path}", emoji="💾")

    table = comparison_table(truth, ols, ga, pso, objective)
    return Comparison(dataset=dataset, truth=truth, ols=ols, ga=ga, pso=pso, table=table)


def run_comparison(config, console=None, history_dir: Optional[str] = None) -> Comparison:
    """Simulate the dataset described by ``config.data`` and compare the estimators on it."""
    _validate_inputs(config.bounds, config.ga, config.pso)
    data = config.data
    if data.representative:
        dataset, seed = simulate_representative_dataset(data.truth, data.n, data.x_low,
                                                        data.x_high, data.seed)
    else:
        seed = data.seed
        dataset = simulate_dataset(data.truth, data.n, data.x_low, data.x_high, seed)
    logger.debug("Simulated %d observations with seed %d", len(dataset), seed)
    return compare_estimators(
        dataset,
        data.truth,
        config.bounds,
        config.ga,
        config.pso,
        n_processes=config.n_processes,
        console=console,
        history_dir=history_dir,
    )
