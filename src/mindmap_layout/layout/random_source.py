"""Single random source for an optimization run.

Move proposals and Metropolis acceptance draws both come from one
:class:`RandomSource`, created once per run and threaded through the
annealer. Tests can pass any object with the same two methods to replay a
fixed sequence.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """Capability the annealer draws all of its randomness from."""

    def randbelow(self, n: int) -> int:
        """Uniform integer in ``[0, n)``."""
        ...

    def random(self) -> float:
        """Uniform float in ``[0, 1)``."""
        ...


class NumpyRandomSource:
    """:class:`RandomSource` backed by a numpy ``Generator``.

    Args:
        seed: Seed for ``numpy.random.default_rng``. None for
            non-deterministic runs.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def randbelow(self, n: int) -> int:
        return int(self._rng.integers(n))

    def random(self) -> float:
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed!r})"


def make_random_source(source: RandomSource | int | None = None) -> RandomSource:
    """Return *source* if it already is a random source, else seed a new one."""
    if isinstance(source, RandomSource):
        return source
    return NumpyRandomSource(source)
