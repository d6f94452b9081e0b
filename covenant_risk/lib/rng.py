"""Seeded pseudorandom generator for reproducible simulations."""

import math
import numbers
from typing import Optional

import numpy as np

from .errors import InvalidConfigurationError

MODULUS = 2 ** 31
MULTIPLIER = 1103515245
INCREMENT = 12345
MAX_STATE = MODULUS - 1

# Smallest non-zero draw; keeps Box-Muller's log defined when the state hits 0
_MIN_UNIFORM = 1.0 / MAX_STATE


class SeededRandom:
    """Linear congruential generator with distribution transforms.

    The same seed and the same sequence of calls always produce bit-identical
    output. Each simulation run owns its own instance; nothing is shared
    between runs.

    Example:
        >>> rng = SeededRandom(42)
        >>> u = rng.uniform()
        >>> x = rng.normal(0.0, 0.1)
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize the generator.

        Args:
            seed: Integer seed. If None, one is drawn from numpy's
                  entropy-seeded generator and exposed as ``seed``.
        """
        if seed is None:
            seed = int(np.random.default_rng().integers(0, MAX_STATE))
        elif isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
            raise InvalidConfigurationError(f"Seed must be an integer, got {seed!r}")
        self.seed = int(seed)
        self._state = self.seed % MODULUS

    def uniform(self) -> float:
        """Advance the state and return a draw in [0, 1]."""
        self._state = (self._state * MULTIPLIER + INCREMENT) % MODULUS
        return self._state / MAX_STATE

    def normal(self, mean: float = 0.0, std_dev: float = 1.0) -> float:
        """Normal draw via the Box-Muller transform.

        Args:
            mean: Distribution mean
            std_dev: Distribution standard deviation

        Returns:
            mean + std_dev * z for a standard normal z
        """
        u1 = self.uniform()
        u2 = self.uniform()
        if u1 <= 0.0:
            u1 = _MIN_UNIFORM
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + std_dev * z

    def uniform_range(self, min_value: float, max_value: float) -> float:
        """Uniform draw in [min_value, max_value]."""
        return min_value + self.uniform() * (max_value - min_value)

    def triangular(self, min_value: float, max_value: float, mode: float) -> float:
        """Triangular draw using inverse-CDF sampling."""
        return inverse_triangular(self.uniform(), min_value, max_value, mode)

    def lognormal(self, mean: float, std_dev: float) -> float:
        """Lognormal draw parameterized by the mean and std of the lognormal itself.

        Args:
            mean: Mean of the lognormal distribution (must be positive)
            std_dev: Standard deviation of the lognormal distribution

        Returns:
            A positive lognormal sample
        """
        mu, sigma = lognormal_params(mean, std_dev)
        return math.exp(mu + sigma * self.normal(0.0, 1.0))

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed})"


def inverse_triangular(u: float, min_value: float, max_value: float,
                       mode: float) -> float:
    """Map a uniform percentile onto a triangular distribution.

    Args:
        u: Uniform percentile in [0, 1]
        min_value: Lower bound
        max_value: Upper bound
        mode: Most likely value

    Returns:
        Triangular quantile at ``u``
    """
    span = max_value - min_value
    fc = (mode - min_value) / span
    if u < fc:
        return min_value + math.sqrt(u * span * (mode - min_value))
    return max_value - math.sqrt((1.0 - u) * span * (max_value - mode))


def lognormal_params(mean: float, std_dev: float):
    """Derive the underlying normal (mu, sigma) from a lognormal mean and std."""
    if mean <= 0:
        raise InvalidConfigurationError(
            f"Lognormal mean must be positive, got {mean}"
        )
    sigma = math.sqrt(math.log(1.0 + (std_dev / mean) ** 2))
    mu = math.log(mean) - 0.5 * sigma * sigma
    return mu, sigma
