"""Region sufficient statistics and the empty-region set."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ._capacity import grow_axis
from ._errors import InvariantError

if TYPE_CHECKING:
    from ._lexicon import CoordinateLexicon


class RegionState:
    """Arena of region slots addressed by index.

    ``capacity`` slots are allocated (expectedR); slots ``[0, in_use)`` have
    been opened (currentR). Slot ``in_use`` is the fresh empty slot offered
    to toponyms as a new region. ``empty`` holds every slot with a zero
    token count: recycled slots below ``in_use`` plus the fresh slot.
    """

    __slots__ = (
        "capacity", "in_use", "empty", "_lexicon",
        "word_region", "document_region", "region_counts",
        "toponym_counts", "means", "coordinate_counts",
    )

    def __init__(
        self,
        n_words: int,
        n_documents: int,
        lexicon: CoordinateLexicon,
        capacity: int,
    ) -> None:
        if capacity < 1:
            raise InvariantError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.in_use = 0
        self.empty: set[int] = {0}
        self._lexicon = lexicon
        self.word_region = np.zeros((n_words, capacity), dtype=np.int64)
        self.document_region = np.zeros((n_documents, capacity), dtype=np.int64)
        self.region_counts = np.zeros(capacity, dtype=np.int64)
        self.toponym_counts = np.zeros(capacity, dtype=np.int64)
        self.means = np.zeros((capacity, 3), dtype=np.float64)
        self.coordinate_counts = np.zeros((capacity, lexicon.n_pairs), dtype=np.int64)

    # -- Token updates --

    def assign(self, region: int, word: int, document: int, candidate: int = -1) -> None:
        """Add one token to region; candidate >= 0 marks a toponym."""
        if region < 0 or region > self.in_use or region >= self.capacity:
            raise InvariantError(
                f"assign to region {region} with {self.in_use} in use "
                f"and capacity {self.capacity}"
            )
        self.region_counts[region] += 1
        self.document_region[document, region] += 1
        self.word_region[word, region] += 1
        if candidate >= 0:
            self.toponym_counts[region] += 1
            self.coordinate_counts[region, self._lexicon.offset(word) + candidate] += 1
            self.means[region] += self._lexicon.vector(word, candidate)
        self.empty.discard(region)

    def retract(self, region: int, word: int, document: int, candidate: int = -1) -> None:
        """Remove one token from region, emptying the slot if nothing remains."""
        if region < 0 or region >= self.capacity or self.region_counts[region] <= 0:
            raise InvariantError(f"retract from region {region} with no tokens")
        if self.document_region[document, region] <= 0 or self.word_region[word, region] <= 0:
            raise InvariantError(
                f"retract word {word} / document {document} not counted in region {region}"
            )
        if candidate >= 0:
            flat = self._lexicon.offset(word) + candidate
            if self.toponym_counts[region] <= 0 or self.coordinate_counts[region, flat] <= 0:
                raise InvariantError(
                    f"retract toponym {word}/{candidate} not counted in region {region}"
                )
        self.region_counts[region] -= 1
        self.document_region[document, region] -= 1
        self.word_region[word, region] -= 1
        if candidate >= 0:
            self.toponym_counts[region] -= 1
            self.coordinate_counts[region, flat] -= 1
            if self.toponym_counts[region] == 0:
                self.means[region] = 0.0
            else:
                self.means[region] -= self._lexicon.vector(word, candidate)
        if self.region_counts[region] == 0:
            self.clear(region)

    def clear(self, region: int) -> None:
        """Zero every statistic of region and mark it empty."""
        self.region_counts[region] = 0
        self.toponym_counts[region] = 0
        self.document_region[:, region] = 0
        self.word_region[:, region] = 0
        self.coordinate_counts[region] = 0
        self.means[region] = 0.0
        self.empty.add(region)

    def open_fresh_slot(self) -> None:
        """Promote the fresh slot to an opened region and register the next one."""
        self.in_use += 1
        self.empty.add(self.in_use)

    # -- Queries --

    def occupied(self) -> np.ndarray:
        """Opened regions with a nonzero token count."""
        return np.flatnonzero(self.region_counts[: self.in_use] > 0)

    def empty_mask(self, n: int) -> np.ndarray:
        """Boolean mask over the first n slots marking empty regions."""
        mask = np.zeros(n, dtype=bool)
        for region in self.empty:
            if region < n:
                mask[region] = True
        return mask

    # -- Capacity --

    def prepare_resize(self, new_capacity: int) -> dict[str, Any]:
        return {
            "word_region": grow_axis(self.word_region, new_capacity, 1),
            "document_region": grow_axis(self.document_region, new_capacity, 1),
            "region_counts": grow_axis(self.region_counts, new_capacity, 0),
            "toponym_counts": grow_axis(self.toponym_counts, new_capacity, 0),
            "means": grow_axis(self.means, new_capacity, 0),
            "coordinate_counts": grow_axis(self.coordinate_counts, new_capacity, 0),
        }

    def commit_resize(self, arrays: dict[str, Any], new_capacity: int) -> None:
        self.word_region = arrays["word_region"]
        self.document_region = arrays["document_region"]
        self.region_counts = arrays["region_counts"]
        self.toponym_counts = arrays["toponym_counts"]
        self.means = arrays["means"]
        self.coordinate_counts = arrays["coordinate_counts"]
        self.capacity = new_capacity
