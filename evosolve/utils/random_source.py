"""
Deterministic Random Source

A single seeded stream shared by the engine and every genetic operator of a
run. The engine receives it in its constructor and hands it to the operators
through their call signatures, so two runs with the same seed, configuration
and problem adapter draw exactly the same numbers in the same order.
"""
import math
import uuid
from typing import List, MutableSequence, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar('T')


class RandomSource:
    """
    Seeded pseudo-random generator (Mersenne Twister via numpy).

    Example:
        >>> rng = RandomSource(seed=1234)
        >>> rng.randint(0, 10)
        ...
        >>> rng.poisson(2.0)
        ...
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._generator = np.random.Generator(np.random.MT19937(seed))

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self._generator.random())

    def randint(self, low: int, high: int) -> int:
        """
        Uniform integer in [low, high).

        Raises:
            ValueError: if the range is empty
        """
        if high <= low:
            raise ValueError(f"empty range for randint: [{low}, {high})")
        return int(self._generator.integers(low, high))

    def poisson(self, mean: float) -> int:
        """
        Poisson-distributed count using exponential waiting times.

        Accumulates -ln(U)/mean until the running sum exceeds 1.0 and returns
        the number of draws taken before that happened.
        """
        if mean <= 0:
            raise ValueError(f"poisson mean must be > 0, got {mean}")

        count = 0
        elapsed = 0.0
        while True:
            # 1 - U lies in (0, 1], keeps log() finite
            elapsed -= math.log(1.0 - self.random()) / mean
            if elapsed > 1.0:
                return count
            count += 1

    def shuffle(self, items: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self.randint(0, i + 1)
            items[i], items[j] = items[j], items[i]

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[self.randint(0, len(items))]

    def sample_indices(self, size: int, count: int) -> List[int]:
        """`count` distinct indices out of range(size), in random order."""
        if count > size:
            raise ValueError(f"cannot sample {count} distinct indices out of {size}")
        indices = list(range(size))
        self.shuffle(indices)
        return indices[:count]

    def uuid4(self) -> str:
        """Reproducible UUID-4 string built from 16 random bytes."""
        return str(uuid.UUID(bytes=self._generator.bytes(16), version=4))

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
