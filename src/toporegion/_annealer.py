"""Annealing schedules that reshape sampling scores, and sample averaging."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ._capacity import grow_axis
from ._types import AveragedCounts

if TYPE_CHECKING:
    from ._config import SamplerConfig
    from ._state import RegionState

EPSILON = 1e-6


class SampleAccumulator:
    """Running sums of region statistics over collected sweeps.

    These are the decoder's mirrors of the live arrays, so they are resized
    together with the RegionState.
    """

    __slots__ = (
        "capacity", "samples", "word_region", "document_region",
        "region_counts", "means", "coordinate_counts",
    )

    def __init__(
        self, n_words: int, n_documents: int, n_pairs: int, capacity: int
    ) -> None:
        self.capacity = capacity
        self.samples = 0
        self.word_region = np.zeros((n_words, capacity))
        self.document_region = np.zeros((n_documents, capacity))
        self.region_counts = np.zeros(capacity)
        self.means = np.zeros((capacity, 3))
        self.coordinate_counts = np.zeros((capacity, n_pairs))

    def add(self, state: RegionState) -> None:
        self.word_region += state.word_region
        self.document_region += state.document_region
        self.region_counts += state.region_counts
        self.means += state.means
        self.coordinate_counts += state.coordinate_counts
        self.samples += 1

    def averaged(self) -> AveragedCounts:
        n = self.samples
        if n == 0:
            raise ValueError("no samples collected")
        return AveragedCounts(
            word_region=self.word_region / n,
            document_region=self.document_region / n,
            region_counts=self.region_counts / n,
            means=self.means / n,
            coordinate_counts=self.coordinate_counts / n,
            samples=n,
        )

    def prepare_resize(self, new_capacity: int) -> dict[str, Any]:
        return {
            "word_region": grow_axis(self.word_region, new_capacity, 1),
            "document_region": grow_axis(self.document_region, new_capacity, 1),
            "region_counts": grow_axis(self.region_counts, new_capacity, 0),
            "means": grow_axis(self.means, new_capacity, 0),
            "coordinate_counts": grow_axis(self.coordinate_counts, new_capacity, 0),
        }

    def commit_resize(self, arrays: dict[str, Any], new_capacity: int) -> None:
        self.word_region = arrays["word_region"]
        self.document_region = arrays["document_region"]
        self.region_counts = arrays["region_counts"]
        self.means = arrays["means"]
        self.coordinate_counts = arrays["coordinate_counts"]
        self.capacity = new_capacity


def snapshot(state: RegionState) -> AveragedCounts:
    """Float copy of the live statistics, used when no samples were collected."""
    return AveragedCounts(
        word_region=state.word_region.astype(np.float64),
        document_region=state.document_region.astype(np.float64),
        region_counts=state.region_counts.astype(np.float64),
        means=state.means.copy(),
        coordinate_counts=state.coordinate_counts.astype(np.float64),
        samples=0,
    )


class Annealer:
    """Temperature schedule over sweeps.

    ``next_iteration()`` advances to the next sweep and returns False when the
    schedule is exhausted. ``anneal(scores)`` reshapes scores in place and
    returns them with their total mass.
    """

    def __init__(
        self,
        temperatures: list[float],
        iterations: int,
        *,
        burn_in: int = 0,
        sample_lag: int = 1,
    ) -> None:
        self._temperatures = temperatures
        self._iterations = iterations
        self._burn_in = burn_in
        self._sample_lag = sample_lag
        self._level = 0
        self._inner = -1
        self.temperature = temperatures[0]
        self.sweeps = 0

    @property
    def total_sweeps(self) -> int:
        return len(self._temperatures) * self._iterations

    def next_iteration(self) -> bool:
        self._inner += 1
        if self._inner == self._iterations:
            self._inner = 0
            self._level += 1
        if self._level >= len(self._temperatures):
            return False
        self.temperature = self._temperatures[self._level]
        self.sweeps += 1
        return True

    @property
    def collecting(self) -> bool:
        """True on sweeps whose counts go into the averaged statistics."""
        if self._level != len(self._temperatures) - 1:
            return False
        past = self._inner - self._burn_in
        return past >= 0 and past % self._sample_lag == 0

    def collect_samples(self, state: RegionState, accumulator: SampleAccumulator) -> bool:
        if not self.collecting:
            return False
        accumulator.add(state)
        return True

    def anneal(self, scores: np.ndarray) -> tuple[np.ndarray, float]:
        raise NotImplementedError


class EmptyAnnealer(Annealer):
    """Identity reshape at temperature 1."""

    def __init__(self, config: SamplerConfig) -> None:
        super().__init__(
            [1.0], config.iterations,
            burn_in=config.burn_in, sample_lag=config.sample_lag,
        )

    def anneal(self, scores: np.ndarray) -> tuple[np.ndarray, float]:
        return scores, float(scores.sum())


class SimulatedAnnealer(Annealer):
    """Raises scores to ``1 / T`` while T cools linearly to the target."""

    def __init__(self, config: SamplerConfig) -> None:
        temperatures: list[float] = []
        t = config.initial_temperature
        while t > config.target_temperature + EPSILON:
            temperatures.append(t)
            t -= config.temperature_decrement
        temperatures.append(config.target_temperature)
        super().__init__(
            temperatures, config.iterations,
            burn_in=config.burn_in, sample_lag=config.sample_lag,
        )

    def anneal(self, scores: np.ndarray) -> tuple[np.ndarray, float]:
        if self.temperature != 1.0:
            np.power(scores, 1.0 / self.temperature, out=scores)
        return scores, float(scores.sum())


class MaximumPosteriorDecoder(Annealer):
    """Single pass keeping only the first maximal score (temperature -> 0)."""

    def __init__(self) -> None:
        super().__init__([0.0], 1)

    @property
    def collecting(self) -> bool:
        return False

    def anneal(self, scores: np.ndarray) -> tuple[np.ndarray, float]:
        if scores.size == 0:
            return scores, 0.0
        best = int(np.argmax(scores))
        peak = scores[best]
        scores[:] = 0.0
        if not (np.isfinite(peak) and peak > 0.0):
            return scores, 0.0
        scores[best] = 1.0
        return scores, 1.0


def make_annealer(config: SamplerConfig) -> Annealer:
    if abs(config.initial_temperature - config.target_temperature) < EPSILON:
        return EmptyAnnealer(config)
    return SimulatedAnnealer(config)
