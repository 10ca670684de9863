"""Candidate coordinate table for toponyms."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

import numpy as np

from ._errors import LexiconError
from ._sphere import spherical_to_cartesian


class CoordinateLexicon:
    """Immutable map from toponym id to its ordered candidate unit vectors.

    Every ``(toponym, candidate)`` pair also has a position in one flat
    enumeration (``offset(t) + k``) so per-region candidate counts can live
    in a single 2-D array.
    """

    __slots__ = ("_candidates", "_offsets", "_n_pairs", "_max_candidates")

    def __init__(self, candidates: Mapping[int, np.ndarray]) -> None:
        if not candidates:
            raise LexiconError("lexicon has no toponyms")
        n_toponyms = max(candidates) + 1
        table: list[np.ndarray | None] = [None] * n_toponyms
        for toponym_id, vectors in candidates.items():
            if toponym_id < 0:
                raise LexiconError(f"negative toponym id {toponym_id}")
            arr = np.asarray(vectors, dtype=np.float64)
            if arr.ndim != 2 or arr.shape[1] != 3:
                raise LexiconError(
                    f"toponym {toponym_id}: expected (k, 3) vectors, got shape {arr.shape}"
                )
            if arr.shape[0] == 0:
                raise LexiconError(f"toponym {toponym_id} has no candidate coordinates")
            if not np.all(np.isfinite(arr)):
                raise LexiconError(f"toponym {toponym_id} has non-finite coordinates")
            arr.setflags(write=False)
            table[toponym_id] = arr

        offsets = [0] * n_toponyms
        total = 0
        widest = 0
        for t, arr in enumerate(table):
            offsets[t] = total
            if arr is not None:
                total += arr.shape[0]
                widest = max(widest, arr.shape[0])

        self._candidates = table
        self._offsets = offsets
        self._n_pairs = total
        self._max_candidates = widest

    @classmethod
    def from_degrees(
        cls, records: Mapping[int, Sequence[float]]
    ) -> CoordinateLexicon:
        """Build from flattened ``[lat0, lon0, lat1, lon1, ...]`` records in degrees."""
        candidates: dict[int, np.ndarray] = {}
        for toponym_id, flat in records.items():
            if len(flat) % 2 != 0:
                raise LexiconError(
                    f"toponym {toponym_id}: odd number of coordinate values ({len(flat)})"
                )
            if not flat:
                raise LexiconError(f"toponym {toponym_id} has no candidate coordinates")
            vectors = []
            for i in range(0, len(flat), 2):
                try:
                    lat, lon = float(flat[i]), float(flat[i + 1])
                except (TypeError, ValueError) as exc:
                    raise LexiconError(
                        f"toponym {toponym_id} has non-numeric coordinates"
                    ) from exc
                if not (math.isfinite(lat) and math.isfinite(lon)):
                    raise LexiconError(f"toponym {toponym_id} has non-finite coordinates")
                if not -90.0 <= lat <= 90.0:
                    raise LexiconError(
                        f"toponym {toponym_id}: latitude {lat} outside [-90, 90]"
                    )
                vectors.append(spherical_to_cartesian(lat, lon))
            candidates[int(toponym_id)] = np.vstack(vectors)
        return cls(candidates)

    def __contains__(self, toponym_id: object) -> bool:
        return (
            isinstance(toponym_id, (int, np.integer))
            and 0 <= toponym_id < len(self._candidates)
            and self._candidates[toponym_id] is not None
        )

    def __len__(self) -> int:
        return sum(1 for arr in self._candidates if arr is not None)

    @property
    def n_toponyms(self) -> int:
        """Size of the toponym id space (max id + 1)."""
        return len(self._candidates)

    @property
    def n_pairs(self) -> int:
        return self._n_pairs

    @property
    def max_candidates(self) -> int:
        return self._max_candidates

    def candidates(self, toponym_id: int) -> np.ndarray:
        """Read-only (k, 3) array of candidate unit vectors."""
        arr = self._candidates[toponym_id] if 0 <= toponym_id < len(self._candidates) else None
        if arr is None:
            raise LexiconError(f"toponym {toponym_id} is not in the lexicon")
        return arr

    def n_candidates(self, toponym_id: int) -> int:
        return self.candidates(toponym_id).shape[0]

    def offset(self, toponym_id: int) -> int:
        """Flat position of candidate 0 of toponym_id."""
        self.candidates(toponym_id)
        return self._offsets[toponym_id]

    def vector(self, toponym_id: int, candidate: int) -> np.ndarray:
        return self.candidates(toponym_id)[candidate]
