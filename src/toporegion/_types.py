"""Data structures handed to the output layer."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True, frozen=True)
class AveragedCounts:
    """Sufficient statistics averaged over the collected samples.

    Arrays are region-indexed on their last axis (first axis for
    region_counts and means) and sized to the capacity at the end of training.
    """
    word_region: np.ndarray          # (W, R)
    document_region: np.ndarray      # (D, R)
    region_counts: np.ndarray        # (R,)
    means: np.ndarray                # (R, 3), unnormalized
    coordinate_counts: np.ndarray    # (R, n_pairs)
    samples: int                     # 0 when copied from the final live state


@dataclass(slots=True, frozen=True)
class ModelResult:
    regions: np.ndarray       # per token, -1 for stopwords
    coordinates: np.ndarray   # per token, -1 unless a content toponym
    averaged: AveragedCounts
    in_use: int               # currentR
    capacity: int             # expectedR
    expansions: int
