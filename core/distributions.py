"""
Random distributions used by the simulation.

Every stochastic decision in a run (infection waits, disease stage durations,
recovery rolls, schedule adherence, place sizes, shuffling) is drawn from a
single RandomSource so that a fixed seed replays the same trajectory.  The
order of draws is part of the observable behavior.
"""

import math
from typing import MutableSequence, Optional

import numpy as np


class RandomSource:
    """
    Seeded source of uniform, exponential and log-normal draws.

    Args:
        seed: Seed for the underlying numpy Generator (None for OS entropy)
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        """Uniform draw in [0, 1)."""
        return float(self._rng.random())

    def chance(self, probability: float) -> bool:
        """True with the given probability; 0 never happens and 1 always does."""
        return self.uniform() < probability

    def exponential(self, mean: float) -> float:
        """
        Exponential distribution.

        Computed as ``mean * -ln(U)`` with U in (0, 1], so the result is
        finite and non-negative for any finite mean.
        """
        u = 1.0 - self.uniform()
        return mean * -math.log(u)

    def log_normal(self, median: float, sigma: float) -> float:
        """
        Log-normal distribution.

        Args:
            median: Median of the distribution
            sigma: Sigma of the underlying normal distribution

        Returns:
            ``median * exp(sigma * Z)`` for a standard normal Z
        """
        z = float(self._rng.standard_normal())
        return median * math.exp(sigma * z)

    def shuffle(self, items: MutableSequence) -> None:
        """Shuffle a list in place."""
        self._rng.shuffle(items)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"
