"""Toporegion: nonparametric spherical region model for toponym resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._config import SamplerConfig, load_config
from ._corpus import Corpus
from ._errors import (
    ChecksumError,
    ConfigError,
    CorpusError,
    DegenerateScoresError,
    InputError,
    InvariantError,
    LexiconError,
    ToporegionError,
    VersionError,
)
from ._lexicon import CoordinateLexicon
from ._types import AveragedCounts, ModelResult

if TYPE_CHECKING:
    from pathlib import Path

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "load",
    "AveragedCounts",
    "ChecksumError",
    "ConfigError",
    "CoordinateLexicon",
    "Corpus",
    "CorpusError",
    "DegenerateScoresError",
    "InputError",
    "InvariantError",
    "LexiconError",
    "ModelResult",
    "SamplerConfig",
    "SphericalRegionModel",
    "ToporegionError",
    "VersionError",
    "load_config",
]


def load(data_dir: Path | str) -> tuple[Corpus, CoordinateLexicon]:
    """Load a data directory and return its corpus and coordinate lexicon."""
    from ._loader import load_data

    return load_data(data_dir)


# Deferred import so SphericalRegionModel is available as
# toporegion.SphericalRegionModel without pulling in the sampler eagerly.
def __getattr__(name: str):
    if name == "SphericalRegionModel":
        from ._sampler import SphericalRegionModel
        return SphericalRegionModel
    raise AttributeError(f"module 'toporegion' has no attribute {name!r}")
