"""Sampler hyperparameters and their defaults."""

from __future__ import annotations

import dataclasses
import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ._errors import ConfigError

# CRP prior
CRP_ALPHA = 1.0

# Dirichlet smoothing
ALPHA = 0.1       # document-region
BETA = 0.1        # word-region

# von Mises-Fisher concentration of the region kernel
KAPPA = 20.0

# Annealing schedule
INITIAL_TEMPERATURE = 1.0
TARGET_TEMPERATURE = 1.0
TEMPERATURE_DECREMENT = 0.1
ITERATIONS = 100       # sweeps per temperature level
BURN_IN = 50           # sweeps at the target level before sampling
SAMPLE_LAG = 10

RANDOM_SEED = 1

# Region capacity
EXPANSION_FACTOR = 0.25


@dataclass(slots=True, frozen=True)
class SamplerConfig:
    crp_alpha: float = CRP_ALPHA
    alpha: float = ALPHA
    beta: float = BETA
    kappa: float = KAPPA
    initial_temperature: float = INITIAL_TEMPERATURE
    target_temperature: float = TARGET_TEMPERATURE
    temperature_decrement: float = TEMPERATURE_DECREMENT
    iterations: int = ITERATIONS
    burn_in: int = BURN_IN
    sample_lag: int = SAMPLE_LAG
    random_seed: int | None = RANDOM_SEED   # None draws fresh OS entropy
    initial_regions: int | None = None       # None derives it from crp_alpha and N
    expansion_factor: float = EXPANSION_FACTOR

    def __post_init__(self) -> None:
        for name in ("crp_alpha", "beta", "kappa", "target_temperature", "expansion_factor"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0.0):
                raise ConfigError(f"{name} must be a positive finite number, got {value!r}")
        if not (math.isfinite(self.alpha) and self.alpha >= 0.0):
            raise ConfigError(f"alpha must be >= 0, got {self.alpha!r}")
        if not math.isfinite(self.initial_temperature):
            raise ConfigError("initial_temperature must be finite")
        if self.initial_temperature < self.target_temperature:
            raise ConfigError(
                f"initial_temperature {self.initial_temperature} is below "
                f"target_temperature {self.target_temperature}"
            )
        if not (math.isfinite(self.temperature_decrement) and self.temperature_decrement > 0.0):
            raise ConfigError(
                f"temperature_decrement must be positive, got {self.temperature_decrement!r}"
            )
        if self.iterations < 1:
            raise ConfigError(f"iterations must be >= 1, got {self.iterations}")
        if self.burn_in < 0:
            raise ConfigError(f"burn_in must be >= 0, got {self.burn_in}")
        if self.sample_lag < 1:
            raise ConfigError(f"sample_lag must be >= 1, got {self.sample_lag}")
        if self.initial_regions is not None and self.initial_regions < 2:
            raise ConfigError(
                f"initial_regions must be >= 2, got {self.initial_regions}"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> SamplerConfig:
        """Build from a mapping, skipping None values and rejecting unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in values.items() if v is not None})

    def replace(self, **changes: Any) -> SamplerConfig:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def load_config(path: Path | str) -> SamplerConfig:
    """Read a SamplerConfig from a JSON object file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    with open(path) as f:
        try:
            values = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(values, dict):
        raise ConfigError(f"{path} must hold a JSON object")
    return SamplerConfig.from_mapping(values)
