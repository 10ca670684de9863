"""Shared fixtures for toporegion tests."""

import numpy as np
import pytest

from toporegion import CoordinateLexicon, Corpus, SamplerConfig
from toporegion._writer import write_input

# Toponyms 0-2 with candidate (lat, lon) pairs in degrees.
TOPONYMS = {
    0: [40.7, -74.0, 50.1, 8.7],      # two candidates
    1: [41.9, -87.6],
    2: [48.9, 2.4, -33.9, 151.2],
}

# Four documents; word 7 only occurs as a stopword, document 3 has no toponyms.
WORD = [0, 3, 4, 7, 1, 3, 2, 5, 6, 7, 2, 1, 4, 6, 0, 3, 5, 7]
DOCUMENT = [0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3]
TOPONYM = [1, 0, 0, 0, 1, 0, 1, 0, 0, 0, 1, 1, 0, 0, 1, 0, 0, 0]
STOPWORD = [0, 0, 0, 1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 1]


@pytest.fixture
def lexicon():
    return CoordinateLexicon.from_degrees(TOPONYMS)


@pytest.fixture
def corpus():
    return Corpus(WORD, DOCUMENT, TOPONYM, STOPWORD)


@pytest.fixture
def data_dir(tmp_path):
    """A loadable data directory holding the fixture corpus."""
    return write_input(tmp_path / "data", WORD, DOCUMENT, TOPONYM, STOPWORD, TOPONYMS)


@pytest.fixture
def config():
    return SamplerConfig(
        iterations=6, burn_in=2, sample_lag=1, random_seed=7, kappa=5.0,
    )


@pytest.fixture
def check_invariants():
    """Assert every bookkeeping invariant of a SphericalRegionModel."""

    def check(model):
        state = model.state
        corpus = model.corpus
        content = corpus.content_indices()
        regions = model.regions[content]

        # Conservation laws
        np.testing.assert_array_equal(state.word_region.sum(axis=1), corpus.word_totals())
        np.testing.assert_array_equal(
            state.document_region.sum(axis=1), corpus.document_totals()
        )

        # Bounds: region < currentR < expectedR
        assert state.in_use < state.capacity
        assert (regions >= 0).all()
        assert (regions < state.in_use).all()
        assert (model.regions[corpus.stopword == 1] == -1).all()

        # Counts agree with the per-token assignments
        np.testing.assert_array_equal(
            np.bincount(regions, minlength=state.capacity), state.region_counts
        )
        is_top = corpus.toponym[content] == 1
        np.testing.assert_array_equal(
            np.bincount(regions[is_top], minlength=state.capacity),
            state.toponym_counts,
        )

        # Empty set is exactly the zero-count slots up to the fresh slot
        zero = set(np.flatnonzero(state.region_counts[: state.in_use + 1] == 0).tolist())
        assert state.empty == zero
        assert state.in_use in state.empty

        # Region means are the sums of member candidate vectors
        expected = np.zeros_like(state.means)
        for i in content[is_top]:
            expected[model.regions[i]] += model.lexicon.vector(
                int(corpus.word[i]), int(model.coordinates[i])
            )
        np.testing.assert_allclose(state.means, expected, atol=1e-9)

    return check
