"""
Run configuration records.

Every hyperparameter that changes the search is a required field; the only
defaults are monitoring settings (stagnation window/tolerance) that never
alter the sequence of candidates. ``load_config`` reads the JSON layout of
``configs/recovery.json``.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .bounds import Bounds
from .dataset import RegressionParameters
from .errors import ConfigurationError, InvalidPopulationSize, InvalidSwarmSize

DEFAULT_CONFIG_PATH = os.path.join("configs", "recovery.json")
VELOCITY_STRATEGIES = ("zero", "invert", "unmodified")


def _require_probability(name, value):
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {value}")


def _require_budget(name, value):
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


def _require_seed(seed):
    if not isinstance(seed, int) or isinstance(seed, bool) or seed < 0:
        raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}")


@dataclass(frozen=True)
class GAConfig:
    """
    Genetic algorithm settings.

    Attributes
    ----------
    population_size : int
        Individuals per generation (at least 2).
    max_generations : int
        Generations evolved after the initial population.
    seed : int
        Seed of the run's random stream.
    crossover_prob : float
        Probability that a parent pair is recombined.
    mutation_prob : float
        Probability that an offspring is mutated.
    gene_mutation_prob : float
        Per-gene mutation probability inside a mutated offspring.
    eta : float
        Crowding degree of SBX crossover and polynomial mutation.
    tournament_size : int
        Contestants per tournament.
    """
    population_size: int
    max_generations: int
    seed: int
    crossover_prob: float
    mutation_prob: float
    gene_mutation_prob: float
    eta: float
    tournament_size: int
    stagnation_window: int = 50
    stagnation_tolerance: float = 1e-8

    def validate(self) -> None:
        if not isinstance(self.population_size, int) or self.population_size < 2:
            raise InvalidPopulationSize(
                f"population_size must be >= 2 to select two parents, got {self.population_size!r}"
            )
        _require_budget("max_generations", self.max_generations)
        _require_seed(self.seed)
        _require_probability("crossover_prob", self.crossover_prob)
        _require_probability("mutation_prob", self.mutation_prob)
        _require_probability("gene_mutation_prob", self.gene_mutation_prob)
        if not self.eta >= 0:
            raise ConfigurationError(f"eta must be non-negative, got {self.eta}")
        _require_budget("tournament_size", self.tournament_size)
        _require_budget("stagnation_window", self.stagnation_window)


@dataclass(frozen=True)
class PSOConfig:
    """
    Particle swarm settings.

    ``velocity_clamp_fraction`` limits each velocity component to that
    fraction of the dimension's span (``None`` disables the limit).
    ``velocity_strategy`` decides what happens to the velocity component of
    a coordinate clamped back onto a bound.
    """
    n_particles: int
    max_iterations: int
    seed: int
    inertia: float
    cognitive: float
    social: float
    initial_velocity_fraction: float
    velocity_clamp_fraction: Optional[float]
    velocity_strategy: str
    stagnation_window: int = 50
    stagnation_tolerance: float = 1e-8

    def validate(self) -> None:
        if not isinstance(self.n_particles, int) or self.n_particles < 1:
            raise InvalidSwarmSize(f"n_particles must be >= 1, got {self.n_particles!r}")
        _require_budget("max_iterations", self.max_iterations)
        _require_seed(self.seed)
        for name in ("inertia", "cognitive", "social", "initial_velocity_fraction"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.velocity_clamp_fraction is not None and not self.velocity_clamp_fraction > 0:
            raise ConfigurationError(
                f"velocity_clamp_fraction must be positive or None, got {self.velocity_clamp_fraction}"
            )
        if self.velocity_strategy not in VELOCITY_STRATEGIES:
            raise ConfigurationError(
                f"Unknown velocity_strategy {self.velocity_strategy!r}, choose one of {VELOCITY_STRATEGIES}"
            )
        _require_budget("stagnation_window", self.stagnation_window)


@dataclass(frozen=True)
class DataConfig:
    """
    Ground truth and sampling design of the simulated dataset.

    With ``representative`` set, ``seed`` is only the first seed tried: the
    dataset used is the first one whose least-squares fit lies near the truth.
    """
    intercept: float
    slope: float
    sigma: float
    n: int
    x_low: float
    x_high: float
    seed: int
    representative: bool = False

    @property
    def truth(self) -> RegressionParameters:
        return RegressionParameters(self.intercept, self.slope, self.sigma)


@dataclass(frozen=True)
class RecoveryConfig:
    data: DataConfig
    bounds: Bounds
    ga: GAConfig
    pso: PSOConfig
    n_processes: Optional[int] = None
    output_dir: str = "results"
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def with_overrides(self, **overrides) -> "RecoveryConfig":
        """
        Return a copy with dotted overrides applied, e.g. ``{"ga.seed": 3}``.
        ``None`` values are skipped.
        """
        sections = {"data": self.data, "ga": self.ga, "pso": self.pso}
        top_level = {}
        for key, value in overrides.items():
            if value is None:
                continue
            section, _, name = key.partition(".")
            if name:
                if section not in sections:
                    raise ConfigurationError(f"Unknown configuration section {section!r}")
                try:
                    sections[section] = replace(sections[section], **{name: value})
                except TypeError as exc:
                    raise ConfigurationError(f"Invalid override {key!r}: {exc}") from exc
            else:
                top_level[key] = value
        try:
            return replace(self, **sections, **top_level)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid override: {exc}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    try:
        return raw[name]
    except KeyError:
        raise ConfigurationError(f"Configuration is missing the {name!r} section") from None


def _build(cls, raw: Mapping[str, Any], name: str):
    try:
        return cls(**_section(raw, name))
    except TypeError as exc:
        raise ConfigurationError(f"Invalid {name!r} section: {exc}") from exc


def config_from_dict(raw: Mapping[str, Any]) -> RecoveryConfig:
    bounds_raw = _section(raw, "bounds")
    known = {"data", "bounds", "ga", "pso", "n_processes", "output_dir"}
    config = RecoveryConfig(
        data=_build(DataConfig, raw, "data"),
        bounds=Bounds.from_mapping({name: tuple(pair) for name, pair in bounds_raw.items()}),
        ga=_build(GAConfig, raw, "ga"),
        pso=_build(PSOConfig, raw, "pso"),
        n_processes=raw.get("n_processes"),
        output_dir=raw.get("output_dir", "results"),
        extra={k: v for k, v in raw.items() if k not in known},
    )
    if config.extra:
        logging.getLogger(__name__).warning(
            "Ignoring unknown configuration keys: %s", sorted(config.extra)
        )
    return config


def load_config(path: str = DEFAULT_CONFIG_PATH) -> RecoveryConfig:
    """
    Load a run configuration from JSON.

    Parameters
    ----------
    path : str
        Path of the JSON file.

    Returns
    -------
    RecoveryConfig

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, or lacks a required field.
    """
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file {path} is not valid JSON: {exc}") from exc
    logging.getLogger(__name__).debug("Loaded configuration from %s", path)
    return config_from_dict(raw)

