"""
Tables, CSV files and plots of a comparison.
"""

import logging
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from rich.table import Table  # noqa: E402

from .comparison import LOG_LIKELIHOOD_ROW  # noqa: E402

logger = logging.getLogger(__name__)

ESTIMATOR_STYLES = {
    "true": {"color": "black", "linestyle": "-", "label": "Truth"},
    "ols": {"color": "blue", "linestyle": "--", "label": "OLS"},
    "ga": {"color": "green", "linestyle": "-.", "label": "GA"},
    "pso": {"color": "red", "linestyle": ":", "label": "PSO"},
}


def _ensure_parent(path):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def render_comparison_table(table, title="📊 Parameter Recovery"):
    """
    Rich table of a comparison frame.

    The estimate closest to the truth in each parameter row is highlighted;
    in the log-likelihood row the highest value is.
    """
    rich_table = Table(show_header=True, header_style="bold green", title=title)
    rich_table.add_column("Parameter", style="bold yellow")
    for column in table.columns:
        rich_table.add_column(str(column), justify="right")

    estimators = [c for c in table.columns if c != "true"]
    for name, row in table.iterrows():
        if name == LOG_LIKELIHOOD_ROW:
            best = row[estimators].astype(float).idxmax()
        else:
            best = (row[estimators] - row["true"]).abs().astype(float).idxmin()
        cells = [str(name)]
        for column in table.columns:
            text = f"{row[column]:.6f}"
            cells.append(f"[bold green]{text}[/bold green]" if column == best else text)
        rich_table.add_row(*cells)
    return rich_table


def save_comparison_csv(table, path):
    _ensure_parent(path)
    table.to_csv(path, float_format="%.10g")
    logger.debug("Comparison table written to %s", path)
    return path


def plot_fits(comparison, path):
    """Scatter of the data with the line implied by each estimator."""
    dataset = comparison.dataset
    table = comparison.table
    x_line = np.linspace(dataset.x.min(), dataset.x.max(), 200)

    fig, ax = plt.subplots(figsize=(12, 7))
    ax.scatter(dataset.x, dataset.y, s=8, alpha=0.35, color="grey", label="Observations")
    for column, style in ESTIMATOR_STYLES.items():
        if column not in table.columns:
            continue
        intercept = table.at["intercept", column]
        slope = table.at["slope", column]
        ax.plot(x_line, intercept + slope * x_line, linewidth=1.5,
                label=f"{style['label']}: {intercept:.3f} + {slope:.3f}x",
                color=style["color"], linestyle=style["linestyle"])
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title("Fitted regression lines")
    ax.legend()
    ax.grid(True)

    plt.tight_layout()
    _ensure_parent(path)
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def plot_convergence(comparison, path):
    """Best log-likelihood per generation (GA) and iteration (PSO)."""
    fig, ax = plt.subplots(figsize=(12, 6))
    for key, result in (("ga", comparison.ga), ("pso", comparison.pso)):
        values = np.array([result.sense.to_maximized(v) for v in result.metadata.best_history])
        values[~np.isfinite(values) | (np.abs(values) >= np.finfo(np.float64).max)] = np.nan
        style = ESTIMATOR_STYLES[key]
        ax.plot(np.arange(len(values)), values, label=style["label"],
                color=style["color"], linestyle=style["linestyle"])

    ols_ll = comparison.table.at[LOG_LIKELIHOOD_ROW, "ols"]
    ax.axhline(ols_ll, color=ESTIMATOR_STYLES["ols"]["color"], linestyle="--",
               linewidth=1, label="OLS")
    ax.set_xlabel("Generation / iteration")
    ax.set_ylabel("Best log-likelihood")
    ax.set_title("Convergence")
    ax.legend()
    ax.grid(True, which="both", ls="--")

    plt.tight_layout()
    _ensure_parent(path)
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path
