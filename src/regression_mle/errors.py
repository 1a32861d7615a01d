"""
Exception hierarchy for regression_mle.

Configuration problems are raised before any random draw is made.
Evaluation problems are contained by the objective and never abort a run.
"""


class RegressionMLEError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(RegressionMLEError, ValueError):
    """Invalid run configuration (sizes, budgets, hyperparameters)."""


class InvalidBounds(ConfigurationError):
    """Lower bound above upper bound, non-finite bound, or dimension mismatch."""


class InvalidPopulationSize(ConfigurationError):
    """GA population too small to select two parents."""


class InvalidSwarmSize(ConfigurationError):
    """PSO swarm with no particles."""


class DegenerateObjective(RegressionMLEError, ArithmeticError):
    """
    Objective undefined for a candidate (e.g. non-positive noise scale).

    Raised from ``Objective.compute`` and caught by ``Objective.evaluate``,
    which substitutes the dominated value for that single candidate.
    """
