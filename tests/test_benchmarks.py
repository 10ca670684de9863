"""Benchmark suite for the toporegion sampler.

Run:  pytest tests/test_benchmarks.py --benchmark-enable
Skip: pytest tests/ -m "not benchmark"
"""

from __future__ import annotations

import numpy as np
import pytest

from toporegion import CoordinateLexicon, Corpus, SamplerConfig, SphericalRegionModel
from toporegion._sampler import draw
from toporegion._sphere import scaled_density

pytestmark = pytest.mark.benchmark

# ---------------------------------------------------------------------------
# Synthetic corpus: 200 documents, 5 toponyms and 20 words each
# ---------------------------------------------------------------------------

N_DOCUMENTS = 200
N_TOPONYMS = 60
N_WORDS = 500


def _synthetic(seed: int = 0) -> tuple[Corpus, CoordinateLexicon]:
    rng = np.random.default_rng(seed)
    candidates = {}
    for t in range(N_TOPONYMS):
        k = int(rng.integers(1, 5))
        lat = rng.uniform(-80.0, 80.0, size=k)
        lon = rng.uniform(-180.0, 180.0, size=k)
        candidates[t] = np.column_stack([lat, lon]).ravel().tolist()
    lexicon = CoordinateLexicon.from_degrees(candidates)

    word, document, toponym = [], [], []
    for d in range(N_DOCUMENTS):
        word += rng.integers(0, N_TOPONYMS, size=5).tolist()
        toponym += [1] * 5
        word += rng.integers(0, N_WORDS, size=20).tolist()
        toponym += [0] * 20
        document += [d] * 25
    corpus = Corpus(word, document, toponym, [0] * len(word))
    return corpus, lexicon


@pytest.fixture(scope="module")
def synthetic():
    return _synthetic()


# ---------------------------------------------------------------------------
# 1. Full runs
# ---------------------------------------------------------------------------


def test_bench_initialize(benchmark, synthetic):
    """Random CRP seating of every content token."""
    corpus, lexicon = synthetic

    def setup():
        model = SphericalRegionModel(corpus, lexicon, SamplerConfig(random_seed=1))
        return (model,), {}

    benchmark.pedantic(
        lambda model: model.initialize(), setup=setup, rounds=5, iterations=1,
    )


def test_bench_train_sweeps(benchmark, synthetic):
    """Five Gibbs sweeps at fixed temperature."""
    corpus, lexicon = synthetic
    cfg = SamplerConfig(iterations=5, burn_in=2, sample_lag=1, random_seed=1)

    def setup():
        model = SphericalRegionModel(corpus, lexicon, cfg)
        model.initialize()
        return (model,), {}

    benchmark.extra_info["n_tokens"] = corpus.n_tokens
    benchmark.pedantic(lambda model: model.train(), setup=setup, rounds=3, iterations=1)


# ---------------------------------------------------------------------------
# 2. Micro-benchmarks
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("n", [8, 64, 512])
def test_bench_draw(benchmark, n):
    """Inverse-CDF draw over n unnormalized scores."""
    rng = np.random.default_rng(0)
    scores = rng.random(n)
    benchmark.pedantic(draw, args=(scores, rng), rounds=1000, iterations=10)


def test_bench_scaled_density(benchmark):
    """Kernel of 4 candidates against 64 region means."""
    rng = np.random.default_rng(0)
    candidates = rng.normal(size=(4, 3))
    candidates /= np.linalg.norm(candidates, axis=1, keepdims=True)
    means = rng.normal(size=(64, 3))
    benchmark(scaled_density, candidates, means, 20.0)
