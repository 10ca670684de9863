"""Parallel token arrays for an integer-coded corpus."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from ._errors import CorpusError

if TYPE_CHECKING:
    from ._lexicon import CoordinateLexicon


def _as_ids(values: Sequence[int] | np.ndarray, name: str) -> np.ndarray:
    try:
        arr = np.asarray(values)
    except ValueError as exc:
        raise CorpusError(f"{name} is not a flat array of ids") from exc
    if arr.ndim != 1:
        raise CorpusError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise CorpusError(f"{name} must hold integers, got {arr.dtype}")
    arr = arr.astype(np.int64, copy=True)
    arr.setflags(write=False)
    return arr


class Corpus:
    """Word, document, toponym-flag and stopword-flag arrays of length N.

    W counts only ids that occur as non-stopwords; stopword ids are never
    used to index region statistics.
    """

    __slots__ = (
        "_word", "_document", "_toponym", "_stopword",
        "_n_words", "_n_documents",
    )

    def __init__(
        self,
        word: Sequence[int] | np.ndarray,
        document: Sequence[int] | np.ndarray,
        toponym: Sequence[int] | np.ndarray,
        stopword: Sequence[int] | np.ndarray,
        *,
        n_words: int | None = None,
        n_documents: int | None = None,
    ) -> None:
        self._word = _as_ids(word, "word")
        self._document = _as_ids(document, "document")
        self._toponym = _as_ids(toponym, "toponym")
        self._stopword = _as_ids(stopword, "stopword")

        n = self._word.size
        for name, arr in (
            ("document", self._document),
            ("toponym", self._toponym),
            ("stopword", self._stopword),
        ):
            if arr.size != n:
                raise CorpusError(
                    f"{name} has {arr.size} entries, expected {n} to match word"
                )
        if n == 0:
            raise CorpusError("corpus has no tokens")
        if self._word.min() < 0:
            raise CorpusError("negative word id")
        if self._document.min() < 0:
            raise CorpusError("negative document id")
        for name, arr in (("toponym", self._toponym), ("stopword", self._stopword)):
            if not np.isin(arr, (0, 1)).all():
                raise CorpusError(f"{name} flags must be 0 or 1")

        content = self._stopword == 0
        if not (content & (self._toponym == 1)).any():
            raise CorpusError("corpus has no non-stopword toponym tokens")

        observed_w = int(self._word[content].max()) + 1
        observed_d = int(self._document.max()) + 1
        if n_words is not None and n_words < observed_w:
            raise CorpusError(f"n_words={n_words} but word id {observed_w - 1} occurs")
        if n_documents is not None and n_documents < observed_d:
            raise CorpusError(
                f"n_documents={n_documents} but document id {observed_d - 1} occurs"
            )
        self._n_words = observed_w if n_words is None else n_words
        self._n_documents = observed_d if n_documents is None else n_documents

    @property
    def word(self) -> np.ndarray:
        return self._word

    @property
    def document(self) -> np.ndarray:
        return self._document

    @property
    def toponym(self) -> np.ndarray:
        return self._toponym

    @property
    def stopword(self) -> np.ndarray:
        return self._stopword

    @property
    def n_tokens(self) -> int:
        return int(self._word.size)

    @property
    def n_words(self) -> int:
        return self._n_words

    @property
    def n_documents(self) -> int:
        return self._n_documents

    def content_indices(self) -> np.ndarray:
        """Indices of all non-stopword tokens, in corpus order."""
        return np.flatnonzero(self._stopword == 0)

    def word_totals(self) -> np.ndarray:
        """Non-stopword occurrences of each word id (length W)."""
        idx = self.content_indices()
        return np.bincount(self._word[idx], minlength=self._n_words)

    def document_totals(self) -> np.ndarray:
        """Non-stopword token count of each document (length D)."""
        idx = self.content_indices()
        return np.bincount(self._document[idx], minlength=self._n_documents)

    def check_lexicon(self, lexicon: CoordinateLexicon) -> None:
        """Raise CorpusError unless every content toponym has candidates."""
        mask = (self._stopword == 0) & (self._toponym == 1)
        for toponym_id in np.unique(self._word[mask]):
            if int(toponym_id) not in lexicon:
                raise CorpusError(
                    f"toponym id {int(toponym_id)} has no candidate coordinates"
                )
