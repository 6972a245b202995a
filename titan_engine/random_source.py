"""
Random Source
=============
Uniform [0, 1) draws shared by every generator in the engine.

All synthesizers take an optional ``rng`` argument. Anything exposing a
``random()`` method returning a float in [0, 1) can be injected, which is
how tests pin the draw sequence. The default wraps NumPy's PCG64
generator so a fixed seed gives a reproducible analysis.
"""

from typing import List, Optional, Union

import numpy as np


SeedLike = Union[None, int, np.random.SeedSequence]


class RandomSource:
    """
    Seedable stream of uniform draws.

    Parameters
    ----------
    seed : int, numpy.random.SeedSequence or None
        ``None`` pulls fresh OS entropy (non-reproducible runs).
    """

    def __init__(self, seed: SeedLike = None):
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._rng = np.random.default_rng(self._seed_seq)

    def random(self) -> float:
        """Single uniform draw in [0, 1)."""
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        """Uniform draw in [low, high) built from one ``random()`` call."""
        return low + (high - low) * self.random()

    def centered(self) -> float:
        """Uniform draw in [-0.5, 0.5)."""
        return self.random() - 0.5

    def spawn(self, n: int) -> List["RandomSource"]:
        """
        Independent child streams for concurrent tasks.

        Children are derived from this source's seed sequence, so a seeded
        parent yields the same children on every run.
        """
        return [RandomSource(child) for child in self._seed_seq.spawn(n)]


def resolve_rng(rng: Optional[object] = None) -> object:
    """Return ``rng`` unchanged, or a fresh unseeded RandomSource."""
    return rng if rng is not None else RandomSource()


def spawn_sources(rng: object, n: int) -> List[object]:
    """
    Split ``rng`` into ``n`` independent sources.

    Sources without a ``spawn`` method (scripted test doubles) are seeded
    from their own draws instead.
    """
    if hasattr(rng, "spawn"):
        return list(rng.spawn(n))
    return [RandomSource(int(rng.random() * 2**32)) for _ in range(n)]
