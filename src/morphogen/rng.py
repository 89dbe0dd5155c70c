"""
Seeded random stream shared by the dispatcher and the generators.

One stream is created per generation call. Every draw in a generation run
goes through it, in a fixed order, so identical seeds reproduce identical
meshes.
"""

from typing import Sequence, TypeVar

import numpy as np

T = TypeVar("T")

_SEED_MASK = (1 << 64) - 1


class SeededRandom:
    """
    Uniform [0, 1) stream backed by numpy's PCG64 generator.

    Any Python int is accepted as a seed; negative seeds are mapped to
    their 64-bit two's complement so ``-1`` and ``1`` stay distinct.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._generator = np.random.default_rng(self.seed & _SEED_MASK)
        self.draws = 0

    def next_uniform(self) -> float:
        """Next double in [0, 1)."""
        self.draws += 1
        return float(self._generator.random())

    def uniform(self, low: float, high: float) -> float:
        """Uniform double in [low, high)."""
        return low + self.next_uniform() * (high - low)

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly (consumes a single draw)."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        index = int(self.next_uniform() * len(items))
        return items[min(index, len(items) - 1)]

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed}, draws={self.draws})"
