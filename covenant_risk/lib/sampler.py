"""Correlated sampling of simulation variables."""

import logging
import math
from typing import Dict, List, Sequence

import numpy as np

from .correlation import build_correlation_matrix, cholesky_decomposition
from .rng import SeededRandom, inverse_triangular, lognormal_params
from .variables import DistributionType, SimulationVariable

logger = logging.getLogger(__name__)

# Abramowitz & Stegun 7.1.26 coefficients
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def normal_cdf(x: float) -> float:
    """Standard normal CDF via the Abramowitz-Stegun rational approximation.

    Absolute error is below 1.5e-7 everywhere.
    """
    sign = -1.0 if x < 0 else 1.0
    x = abs(x) / math.sqrt(2.0)

    t = 1.0 / (1.0 + _P * x)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-x * x)

    return 0.5 * (1.0 + sign * y)


class CorrelatedSampler:
    """Draws correlated values for a fixed set of simulation variables.

    Implements:
        y = L z,  z ~ N(0, I)

    Where L is the Cholesky factor of the variables' correlation matrix.
    Normal variables use y_i directly; uniform and triangular variables are
    mapped through u_i = Φ(y_i) and their inverse CDF; lognormal variables
    use y_i with the derived (mu, sigma).
    """

    def __init__(self, variables: Sequence[SimulationVariable], strict: bool = False):
        """Initialize the sampler.

        Args:
            variables: Variables in sampling order
            strict: Reject correlation matrices that are not valid instead
                    of clamping during decomposition
        """
        self.variables: List[SimulationVariable] = list(variables)
        self.correlation_matrix = build_correlation_matrix(self.variables)
        self.cholesky_factor = cholesky_decomposition(self.correlation_matrix, strict=strict)
        self._factor_rows = self.cholesky_factor.tolist()
        self._lognormal_params = {
            v.id: lognormal_params(v.base_value, v.spread)
            for v in self.variables
            if v.distribution == DistributionType.LOGNORMAL
        }
        logger.debug("Correlation matrix for %s:\n%s",
                     [v.id for v in self.variables], self.correlation_matrix)

    @property
    def num_variables(self) -> int:
        return len(self.variables)

    def correlate(self, z: Sequence[float]) -> List[float]:
        """Apply the lower-triangular factor to independent standard normals."""
        correlated = []
        for i, row in enumerate(self._factor_rows):
            total = 0.0
            for j in range(i + 1):
                total += row[j] * z[j]
            correlated.append(total)
        return correlated

    def transform(self, variable: SimulationVariable, y: float) -> float:
        """Map a correlated standard normal onto the variable's distribution."""
        dist = variable.distribution
        if dist == DistributionType.NORMAL:
            return variable.base_value + variable.spread * y

        if dist == DistributionType.LOGNORMAL:
            mu, sigma = self._lognormal_params[variable.id]
            return math.exp(mu + sigma * y)

        u = normal_cdf(y)
        if dist == DistributionType.UNIFORM:
            low, high = variable.lower_bound, variable.upper_bound
            return low + u * (high - low)

        return inverse_triangular(u, variable.lower_bound, variable.upper_bound,
                                  variable.mode)

    def sample(self, rng: SeededRandom) -> Dict[str, float]:
        """Draw one correlated set of variable values.

        Args:
            rng: Generator owned by the calling run

        Returns:
            Dict mapping variable id to its sampled value
        """
        z = [rng.normal(0.0, 1.0) for _ in range(self.num_variables)]
        y = self.correlate(z)
        return {
            variable.id: self.transform(variable, y_i)
            for variable, y_i in zip(self.variables, y)
        }

    def sample_matrix(self, rng: SeededRandom, num_draws: int) -> np.ndarray:
        """Draw several samples as an array of shape (num_draws, num_variables)."""
        draws = np.zeros((num_draws, self.num_variables))
        for row in range(num_draws):
            values = self.sample(rng)
            draws[row] = [values[v.id] for v in self.variables]
        return draws
