"""SphericalRegionModel: collapsed Gibbs sampler with CRP region growth."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from ._annealer import (
    MaximumPosteriorDecoder,
    SampleAccumulator,
    make_annealer,
    snapshot,
)
from ._capacity import CapacityController, initial_capacity
from ._config import SamplerConfig
from ._errors import DegenerateScoresError, InvariantError, ToporegionError
from ._sphere import scaled_crp_mass, scaled_density
from ._state import RegionState
from ._types import ModelResult

if TYPE_CHECKING:
    from ._annealer import Annealer
    from ._corpus import Corpus
    from ._lexicon import CoordinateLexicon
    from ._types import AveragedCounts

logger = logging.getLogger(__name__)


def draw(scores: np.ndarray, rng: np.random.Generator) -> int:
    """Inverse-CDF draw from unnormalized scores.

    The draw is ``(1 - u) * total`` for u uniform on [0, 1), so it lies in
    (0, total] and the first bin whose cumulative sum meets it always has
    positive mass. Ties go to the lowest index.
    """
    cumulative = np.cumsum(scores)
    total = cumulative[-1] if cumulative.size else 0.0
    if not (math.isfinite(total) and total > 0.0):
        raise DegenerateScoresError(
            f"cannot sample from {scores.size} scores with total mass {total!r}"
        )
    r = (1.0 - rng.random()) * total
    index = int(np.searchsorted(cumulative, r, side="left"))
    return min(index, scores.size - 1)


class SphericalRegionModel:
    """Groups tokens into regions on the sphere and resolves toponyms.

    Usage::

        model = SphericalRegionModel(corpus, lexicon, SamplerConfig(...))
        result = model.run()

    or call ``initialize()``, ``train()`` and ``decode()`` separately.
    """

    def __init__(
        self,
        corpus: Corpus,
        lexicon: CoordinateLexicon,
        config: SamplerConfig | None = None,
    ) -> None:
        corpus.check_lexicon(lexicon)
        self.corpus = corpus
        self.lexicon = lexicon
        self.config = config if config is not None else SamplerConfig()
        cfg = self.config

        self.rng = np.random.default_rng(cfg.random_seed)
        self.annealer: Annealer = make_annealer(cfg)
        self.capacity = CapacityController(cfg.expansion_factor)

        capacity = cfg.initial_regions
        if capacity is None:
            capacity = initial_capacity(cfg.crp_alpha, corpus.n_tokens)
        self.state = RegionState(
            corpus.n_words, corpus.n_documents, lexicon, capacity,
        )
        self.accumulator = SampleAccumulator(
            corpus.n_words, corpus.n_documents, lexicon.n_pairs, capacity,
        )

        n = corpus.n_tokens
        self.regions = np.full(n, -1, dtype=np.int64)
        self.coordinates = np.full(n, -1, dtype=np.int64)
        self.averaged: AveragedCounts | None = None

        self._beta_w = cfg.beta * corpus.n_words
        self._crp_mass = scaled_crp_mass(cfg.crp_alpha, cfg.kappa)
        self._initialized = False
        self._trained = False

    # -- Public API --

    @property
    def in_use(self) -> int:
        return self.state.in_use

    @property
    def expected_regions(self) -> int:
        return self.state.capacity

    def run(self) -> ModelResult:
        self.initialize()
        self.train()
        return self.decode()

    def initialize(self) -> None:
        """Random CRP seating of toponyms, then uniform seating of other words."""
        if self._initialized:
            raise ToporegionError("model is already initialized")
        corpus = self.corpus
        state = self.state
        logger.info(
            "Randomly initializing with %d tokens, %d words, %d documents, "
            "and %d expected regions",
            corpus.n_tokens, corpus.n_words, corpus.n_documents, state.capacity,
        )
        content = corpus.content_indices()
        is_toponym = corpus.toponym[content] == 1

        for i in content[is_toponym]:
            word = int(corpus.word[i])
            weights = np.ones(state.in_use + 1)
            weights[state.in_use] = self.config.crp_alpha
            region = draw(weights, self.rng)
            candidate = int(self.rng.integers(self.lexicon.n_candidates(word)))
            self._place_toponym(i, region, candidate)

        for i in content[~is_toponym]:
            region = int(self.rng.integers(state.in_use))
            self._place(i, region)

        self._initialized = True

    def train(self) -> None:
        """Annealed Gibbs sweeps until the schedule is exhausted."""
        if not self._initialized:
            raise ToporegionError("initialize() must run before train()")
        if self._trained:
            raise ToporegionError("model is already trained")
        corpus = self.corpus
        logger.info(
            "Beginning training with %d tokens, %d words, %d documents, "
            "and %d expected regions over %d sweeps",
            corpus.n_tokens, corpus.n_words, corpus.n_documents,
            self.state.capacity, self.annealer.total_sweeps,
        )
        content = corpus.content_indices()
        annealer = self.annealer
        while annealer.next_iteration():
            for i in content:
                if corpus.toponym[i] == 1:
                    self._resample_toponym(int(i), annealer)
                else:
                    self._resample_word(int(i), annealer)
            annealer.collect_samples(self.state, self.accumulator)
            self.capacity.maybe_expand(self.state, self.accumulator)
            logger.debug(
                "Sweep %d at temperature %.4f: %d regions in use, capacity %d",
                annealer.sweeps, annealer.temperature,
                self.state.in_use, self.state.capacity,
            )

        if self.accumulator.samples:
            self.averaged = self.accumulator.averaged()
        else:
            logger.warning("No samples collected; decoding from final counts")
            self.averaged = snapshot(self.state)
        self._trained = True
        logger.info(
            "Training finished: %d regions in use, %d samples averaged",
            self.state.in_use, self.averaged.samples,
        )

    def decode(self) -> ModelResult:
        """One maximum-posterior pass over averaged statistics. Counts stay frozen."""
        if not self._trained or self.averaged is None:
            raise ToporegionError("train() must run before decode()")
        corpus = self.corpus
        avg = self.averaged
        cfg = self.config
        r = self.state.in_use
        decoder = MaximumPosteriorDecoder()
        content = corpus.content_indices()
        # Training assignments stay paired with the live counts.
        regions = np.full(corpus.n_tokens, -1, dtype=np.int64)
        coordinates = np.full(corpus.n_tokens, -1, dtype=np.int64)

        while decoder.next_iteration():
            for i in content:
                word = int(corpus.word[i])
                doc = int(corpus.document[i])
                if corpus.toponym[i] == 1:
                    candidates = self.lexicon.candidates(word)
                    k = candidates.shape[0]
                    scores = (
                        avg.document_region[doc, :r, None]
                        * scaled_density(candidates, avg.means[:r], cfg.kappa)
                    ).ravel()
                    scores, _ = decoder.anneal(scores)
                    choice = draw(scores, self.rng)
                    regions[i] = choice // k
                    coordinates[i] = choice % k
                else:
                    scores = (
                        (avg.word_region[word, :r] + cfg.beta)
                        / (avg.region_counts[:r] + self._beta_w)
                        * (avg.document_region[doc, :r] + cfg.alpha)
                    )
                    scores, _ = decoder.anneal(scores)
                    regions[i] = draw(scores, self.rng)

        logger.info("Decoded %d tokens into %d regions", content.size, r)
        return ModelResult(
            regions=regions,
            coordinates=coordinates,
            averaged=avg,
            in_use=r,
            capacity=self.state.capacity,
            expansions=self.capacity.expansions,
        )

    # -- Token updates --

    def _place(self, i: int, region: int) -> None:
        corpus = self.corpus
        self.state.assign(region, int(corpus.word[i]), int(corpus.document[i]))
        self.regions[i] = region

    def _place_toponym(self, i: int, region: int, candidate: int) -> None:
        corpus = self.corpus
        state = self.state
        fresh = region == state.in_use
        state.assign(region, int(corpus.word[i]), int(corpus.document[i]), candidate)
        self.regions[i] = region
        self.coordinates[i] = candidate
        if fresh:
            state.open_fresh_slot()
            self.capacity.ensure_fresh_slot(state, self.accumulator)

    def _resample_toponym(self, i: int, annealer: Annealer) -> None:
        corpus = self.corpus
        state = self.state
        word = int(corpus.word[i])
        doc = int(corpus.document[i])
        old = int(self.regions[i])

        state.retract(old, word, doc, int(self.coordinates[i]))
        self.regions[i] = -1
        self.coordinates[i] = -1
        if state.toponym_counts[old] == 0 and state.region_counts[old] > 0:
            self._reset_region(old, annealer)

        candidates = self.lexicon.candidates(word)
        k = candidates.shape[0]
        r = state.in_use + 1    # opened regions plus the fresh slot
        scores = state.document_region[doc, :r, None] * scaled_density(
            candidates, state.means[:r], self.config.kappa,
        )
        scores[state.empty_mask(r)] = self._crp_mass / k

        scores, _ = annealer.anneal(scores.ravel())
        choice = draw(scores, self.rng)
        self._place_toponym(i, choice // k, choice % k)

    def _resample_word(self, i: int, annealer: Annealer) -> None:
        corpus = self.corpus
        word = int(corpus.word[i])
        doc = int(corpus.document[i])
        self.state.retract(int(self.regions[i]), word, doc)
        self.regions[i] = -1

        scores = self._word_scores(word, doc)
        scores, _ = annealer.anneal(scores)
        self._place(i, draw(scores, self.rng))

    def _word_scores(self, word: int, doc: int, exclude: int = -1) -> np.ndarray:
        """Word-given-region times document-region count over opened, non-empty regions.

        A document with no tokens left in any candidate region gives every
        region zero affinity; the word-given-region term alone is used then.
        """
        state = self.state
        cfg = self.config
        r = state.in_use
        scores = (
            (state.word_region[word, :r] + cfg.beta)
            / (state.region_counts[:r] + self._beta_w)
        )
        candidates = ~state.empty_mask(r)
        if exclude >= 0:
            candidates[exclude] = False
        scores[~candidates] = 0.0
        affinity = state.document_region[doc, :r] * candidates
        if affinity.any():
            scores *= affinity
        else:
            logger.debug("Document %d has no tokens in a candidate region", doc)
        return scores

    def _reset_region(self, region: int, annealer: Annealer) -> None:
        """Move the ordinary words of a region that lost its last toponym.

        Each remaining word is rescored over the other occupied regions and
        moved; the region is then cleared. With no other occupied region the
        words stay and the region remains open with a zero mean.
        """
        state = self.state
        if not np.any(state.occupied() != region):
            return
        corpus = self.corpus
        members = np.flatnonzero(self.regions == region)
        for i in members:
            if corpus.stopword[i] or corpus.toponym[i]:
                raise InvariantError(
                    f"token {i} in region {region} is not an ordinary word"
                )
            word = int(corpus.word[i])
            doc = int(corpus.document[i])
            state.retract(region, word, doc)
            scores = self._word_scores(word, doc, exclude=region)
            scores, _ = annealer.anneal(scores)
            target = draw(scores, self.rng)
            state.assign(target, word, doc)
            self.regions[i] = target
        if state.region_counts[region] != 0:
            raise InvariantError(f"region {region} not empty after reset")
