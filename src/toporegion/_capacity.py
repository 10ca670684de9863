"""Region capacity bookkeeping: when and how far to grow region-indexed arrays."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np

from ._errors import InvariantError

if TYPE_CHECKING:
    from ._state import RegionState

logger = logging.getLogger(__name__)


class Resizable(Protocol):
    capacity: int

    def prepare_resize(self, new_capacity: int) -> dict[str, Any]: ...

    def commit_resize(self, arrays: dict[str, Any], new_capacity: int) -> None: ...


def grow_axis(arr: np.ndarray, new_size: int, axis: int) -> np.ndarray:
    """Zero-padded copy of arr with the given axis extended to new_size."""
    old_size = arr.shape[axis]
    if new_size < old_size:
        raise InvariantError(f"cannot shrink axis {axis} from {old_size} to {new_size}")
    shape = list(arr.shape)
    shape[axis] = new_size
    out = np.zeros(shape, dtype=arr.dtype)
    index = [slice(None)] * arr.ndim
    index[axis] = slice(0, old_size)
    out[tuple(index)] = arr
    return out


def initial_capacity(crp_alpha: float, n_tokens: int) -> int:
    """Twice the expected CRP table count, ``crp_alpha * ln(1 + N / crp_alpha)``."""
    expected = math.ceil(crp_alpha * math.log1p(n_tokens / crp_alpha))
    return max(2, 2 * expected)


def needs_expansion(capacity: int, in_use: int, factor: float) -> bool:
    """True when free slots fall below ``factor / (1 + factor)`` of capacity."""
    return capacity - in_use < factor / (1.0 + factor) * capacity


def expanded_capacity(capacity: int, factor: float) -> int:
    return max(capacity + 1, math.ceil(capacity * (1.0 + factor)))


class CapacityController:
    """Grows the live region state and its sample mirrors together."""

    __slots__ = ("_factor", "expansions")

    def __init__(self, factor: float) -> None:
        self._factor = factor
        self.expansions = 0

    @property
    def factor(self) -> float:
        return self._factor

    def maybe_expand(self, state: RegionState, *mirrors: Resizable) -> bool:
        """Expand when the unused margin is too small. Returns True if it grew."""
        if not needs_expansion(state.capacity, state.in_use, self._factor):
            return False
        self.expand(state, *mirrors)
        return True

    def ensure_fresh_slot(self, state: RegionState, *mirrors: Resizable) -> None:
        """Grow until index ``in_use`` (the fresh empty slot) is addressable."""
        while state.in_use >= state.capacity:
            self.expand(state, *mirrors)

    def expand(self, state: RegionState, *mirrors: Resizable) -> int:
        """Resize every participant to the next capacity, all or nothing."""
        old = state.capacity
        for mirror in mirrors:
            if mirror.capacity != old:
                raise InvariantError(
                    f"mirror capacity {mirror.capacity} differs from state capacity {old}"
                )
        new = expanded_capacity(old, self._factor)
        participants: tuple[Resizable, ...] = (state, *mirrors)

        # Nothing is committed until every participant has its new arrays.
        prepared = [p.prepare_resize(new) for p in participants]
        for participant, arrays in zip(participants, prepared):
            participant.commit_resize(arrays, new)

        self.expansions += 1
        logger.info(
            "Expanded region capacity from %d to %d (%d in use)",
            old, new, state.in_use,
        )
        return new
