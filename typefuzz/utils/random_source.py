"""
Seedable random source shared by the generators of one campaign.

Each campaign owns exactly one instance; nothing here touches the
module-level ``random`` state.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def fresh_seed() -> int:
    """Draw a 32-bit seed from system entropy."""
    return random.SystemRandom().randrange(2 ** 32)


class RandomSource:
    """Uniform integers and booleans on demand.

    ``seed=None`` picks a fresh seed from system entropy; the chosen value
    is kept in :attr:`seed` so an interactive run can be replayed.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = fresh_seed() if seed is None else seed
        self._rng = random.Random(self.seed)

    def next_int_in_range(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` (both inclusive)."""
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        return self._rng.randint(low, high)

    def next_bool(self) -> bool:
        return self._rng.getrandbits(1) == 1

    def one_in(self, n: int) -> bool:
        """True with probability ``1/n``."""
        return self.next_int_in_range(0, n - 1) == 0

    def next_float(self) -> float:
        return self._rng.random()

    def choice(self, items: Sequence[T]) -> T:
        return items[self.next_int_in_range(0, len(items) - 1)]

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
