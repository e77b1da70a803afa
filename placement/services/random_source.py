"""Deterministic pseudo-random source for scenario generation.

The generator is a Mulberry32-style mixer. State and intermediates are kept in
one-element `uint32` numpy arrays so additions and multiplications wrap at
32 bits instead of growing into arbitrary-precision integers.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

import numpy as np


T = TypeVar("T")

_INCREMENT = np.uint32(0x6D2B79F5)
_TWO_POW_32 = 4294967296.0


class SeededRandom:
    """Reproducible stream: output depends only on the seed and the call count."""

    def __init__(self, seed: int) -> None:
        self._state = np.array([int(seed) & 0xFFFFFFFF], dtype=np.uint32)

    def next(self) -> float:
        """Return a float in [0, 1)."""
        self._state += _INCREMENT
        t = self._state.copy()
        t = (t ^ (t >> np.uint32(15))) * (t | np.uint32(1))
        t ^= t + (t ^ (t >> np.uint32(7))) * (t | np.uint32(61))
        t = t ^ (t >> np.uint32(14))
        return int(t[0]) / _TWO_POW_32

    def randint(self, minimum: int, maximum: int) -> int:
        """Uniform integer in the inclusive range [minimum, maximum]."""
        if maximum < minimum:
            raise ValueError(f"invalid int range: {minimum}..{maximum}")
        span = maximum - minimum + 1
        return int(self.next() * span) + minimum

    def pick_n(self, items: Sequence[T], count: int) -> list[T]:
        """Pick `count` distinct items uniformly, in draw order."""
        if count >= len(items):
            return list(items)
        pool = list(items)
        picked: list[T] = []
        for _ in range(max(0, count)):
            picked.append(pool.pop(self.randint(0, len(pool) - 1)))
        return picked

    def weighted_index(self, weights: Sequence[float]) -> int:
        """Index drawn with probability proportional to its non-negative weight.

        Negative weights count as zero. When nothing carries weight the pick
        is uniform over the same index range.
        """
        clamped = [max(float(weight), 0.0) for weight in weights]
        total = sum(clamped)
        if total <= 0.0:
            return self.randint(0, max(0, len(clamped) - 1))

        cursor = self.next() * total
        for index, weight in enumerate(clamped):
            if weight <= 0.0:
                continue
            cursor -= weight
            if cursor <= 0.0:
                return index
        return max(
            index for index, weight in enumerate(clamped) if weight > 0.0
        )
