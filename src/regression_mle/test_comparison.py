"""
Tests for the comparison layer, the report artifacts and the command line.
"""

import json
import os

import numpy as np
import pandas as pd
import pytest
from rich.console import Console
from rich.table import Table

import regression_mle.comparison as comparison_module
from regression_mle.bounds import Bounds
from regression_mle.cli import main
from regression_mle.comparison import (
    LOG_LIKELIHOOD_ROW,
    compare_estimators,
    run_comparison,
    simulate_representative_dataset,
)
from regression_mle.config import DEFAULT_CONFIG_PATH, config_from_dict, load_config
from regression_mle.dataset import simulate_dataset
from regression_mle.errors import ConfigurationError, InvalidPopulationSize, InvalidSwarmSize
from regression_mle.history import HistoryTracker
from regression_mle.objective import GaussianLogLikelihood
from regression_mle.ols import fit_ols
from regression_mle.report import (
    plot_convergence,
    plot_fits,
    render_comparison_table,
    save_comparison_csv,
)

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _must_not_run(*args, **kwargs):
    raise AssertionError("work started before the configuration was checked")


@pytest.fixture(scope="module")
def small_raw_config():
    return {
        "data": {"intercept": 1.345, "slope": 4.876, "sigma": 273 ** 0.5, "n": 150,
                 "x_low": 12.5, "x_high": 120.29, "seed": 5},
        "bounds": {"intercept": [-20.0, 20.0], "slope": [-10.0, 10.0], "sigma": [0.0, 50.0]},
        "ga": {"population_size": 16, "max_generations": 10, "seed": 1, "crossover_prob": 0.9,
               "mutation_prob": 0.3, "gene_mutation_prob": 0.34, "eta": 20.0,
               "tournament_size": 3},
        "pso": {"n_particles": 8, "max_iterations": 10, "seed": 2, "inertia": 0.7298,
                "cognitive": 1.49618, "social": 1.49618, "initial_velocity_fraction": 0.1,
                "velocity_clamp_fraction": 0.5, "velocity_strategy": "zero"},
        "output_dir": "results",
    }


@pytest.fixture(scope="module")
def comparison(small_raw_config):
    return run_comparison(config_from_dict(small_raw_config))


def test_table_layout(comparison):
    table = comparison.table
    assert list(table.index) == ["intercept", "slope", "sigma", LOG_LIKELIHOOD_ROW]
    assert list(table.columns) == ["true", "ols", "ga", "pso"]
    assert table.notna().all().all()


def test_table_values(comparison):
    table = comparison.table
    assert table.at["slope", "true"] == 4.876
    assert table.at["intercept", "ols"] == comparison.ols.intercept
    assert table.at["sigma", "ols"] == comparison.ols.residual_std_error
    assert tuple(table.loc[["intercept", "slope", "sigma"], "ga"]) == comparison.ga.position
    assert tuple(table.loc[["intercept", "slope", "sigma"], "pso"]) == comparison.pso.position


def test_log_likelihood_row_uses_maximizing_convention(comparison):
    row = comparison.table.loc[LOG_LIKELIHOOD_ROW]
    objective = GaussianLogLikelihood(comparison.dataset)
    assert row["ga"] == comparison.ga.value
    assert row["pso"] == -comparison.pso.value
    assert row["pso"] == objective.evaluate(comparison.pso.position)
    assert row["true"] == objective.evaluate(comparison.truth.as_vector())
    assert (row < 0).all()
    # no estimator beats the likelihood maximum
    assert row.max() <= comparison.ols.log_likelihood


def test_errors_frame(comparison):
    errors = comparison.errors()
    assert list(errors.columns) == ["ols", "ga", "pso"]
    assert (errors >= 0).all().all()


def test_histories_written(tmp_path, small_raw_config):
    config = config_from_dict(small_raw_config)
    data = config.data
    dataset = simulate_dataset(data.truth, data.n, data.x_low, data.x_high, data.seed)
    compare_estimators(dataset, data.truth, config.bounds, config.ga, config.pso,
                       history_dir=str(tmp_path))
    ga_history = HistoryTracker.load_from_file(str(tmp_path / "ga_history.pkl"))
    pso_history = HistoryTracker.load_from_file(str(tmp_path / "pso_history.pkl"))
    assert len(ga_history) == config.ga.max_generations + 1
    assert pso_history.history_data["sense"] == "minimize"


def test_report_artifacts(tmp_path, comparison):
    csv_path = save_comparison_csv(comparison.table, str(tmp_path / "out" / "comparison.csv"))
    loaded = pd.read_csv(csv_path, index_col=0)
    assert list(loaded.index) == list(comparison.table.index)
    pd.testing.assert_frame_equal(loaded, comparison.table, check_names=False, rtol=1e-9)

    assert os.path.getsize(plot_fits(comparison, str(tmp_path / "fits.png"))) > 0
    assert os.path.getsize(plot_convergence(comparison, str(tmp_path / "convergence.png"))) > 0


def test_rich_table_renders(comparison):
    table = render_comparison_table(comparison.table)
    assert isinstance(table, Table)
    assert table.row_count == 4
    console = Console(record=True, width=120)
    console.print(table)
    assert "log_likelihood" in console.export_text()


def test_cli_end_to_end(tmp_path, small_raw_config):
    raw = dict(small_raw_config, output_dir=str(tmp_path / "results"))
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(raw))

    code = main(["--config", str(config_path), "--generations", "5", "--iterations", "5",
                 "--save-history", "--log-file", str(tmp_path / "run.log")])
    assert code == 0
    for name in ("comparison.csv", "fits.png", "convergence.png", "ga_history.pkl",
                 "pso_history.pkl"):
        assert (tmp_path / "results" / name).exists()
    assert (tmp_path / "run.log").exists()


def test_cli_reports_configuration_errors(tmp_path, small_raw_config):
    raw = json.loads(json.dumps(small_raw_config))
    raw["ga"]["population_size"] = 1
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(raw))
    assert main(["--config", str(config_path), "--no-plots"]) == 2


@pytest.mark.parametrize("section, field, value, error", [
    ("pso", "n_particles", 0, InvalidSwarmSize),
    ("ga", "population_size", 1, InvalidPopulationSize),
    ("pso", "velocity_strategy", "bounce", ConfigurationError),
])
def test_invalid_settings_rejected_before_any_work(monkeypatch, small_raw_config, section,
                                                   field, value, error):
    raw = json.loads(json.dumps(small_raw_config))
    raw[section][field] = value
    config = config_from_dict(raw)
    for name in ("simulate_dataset", "fit_ols", "run_genetic_algorithm", "run_particle_swarm"):
        monkeypatch.setattr(comparison_module, name, _must_not_run)
    with pytest.raises(error):
        run_comparison(config)


def test_bounds_dimension_checked_before_any_work(monkeypatch, small_dataset, truth,
                                                  ga_config, pso_config):
    for name in ("fit_ols", "run_genetic_algorithm", "run_particle_swarm"):
        monkeypatch.setattr(comparison_module, name, _must_not_run)
    with pytest.raises(ConfigurationError, match="dimensions"):
        compare_estimators(small_dataset, truth, Bounds([0.0, 0.0], [1.0, 1.0]),
                           ga_config, pso_config)


def test_shipped_demo_dataset_is_representative():
    data = load_config(os.path.join(REPO_ROOT, DEFAULT_CONFIG_PATH)).data
    dataset, seed = simulate_representative_dataset(data.truth, data.n, data.x_low,
                                                     data.x_high, data.seed)
    assert seed >= data.seed
    fit = fit_ols(dataset)
    assert abs(fit.intercept - data.intercept) < 0.25
    assert abs(fit.slope - data.slope) < 0.05
    assert abs(fit.sigma_mle - data.sigma) < 1.0

    again, _ = simulate_representative_dataset(data.truth, data.n, data.x_low, data.x_high, seed)
    np.testing.assert_array_equal(dataset.y, again.y)


def test_representative_search_gives_up(truth):
    with pytest.raises(ConfigurationError, match="No seed"):
        simulate_representative_dataset(truth, 100, 12.5, 120.29, seed=0, max_attempts=3,
                                        tolerances=(0.0, 0.0, 0.0))
