"""Distribution statistics over simulated covenant ratios and headroom.

All statistics ignore non-finite values, so safely unbounded ratios never
enter the arithmetic. Percentiles use the nearest-rank method
(index = floor(p * n), clamped), not interpolation.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

import numpy as np

from .covenants import RatioResult


@dataclass
class ProbabilityDistribution:
    """Simulated distribution of one covenant metric.

    Attributes:
        covenant_id: Covenant identifier
        metric: Name of the summarized metric
        mean: Mean of finite values
        std_dev: Population standard deviation of finite values
        min: Smallest finite value (NaN if none)
        max: Largest finite value (NaN if none)
        percentiles: Dict mapping confidence level percentage to percentile value
        breach_probability: Percentage of iterations in breach
    """
    covenant_id: str
    metric: str
    mean: float
    std_dev: float
    min: float
    max: float
    percentiles: Dict[float, float] = field(default_factory=dict)
    breach_probability: float = 0.0


@dataclass
class PortfolioSummary:
    """Statistics of headroom pooled across all covenants.

    var_95 and var_99 are the 5th and 1st percentiles of pooled headroom,
    i.e. pessimistic headroom bounds rather than a loss-distribution VaR.
    """
    mean_portfolio_headroom: float
    std_dev_portfolio_headroom: float
    var_95: float
    var_99: float


@dataclass
class WorstCase:
    """The single iteration with the most breached covenants."""
    breach_count: int
    affected_covenants: List[str] = field(default_factory=list)


def finite_values(values: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(values), dtype=float)
    return arr[np.isfinite(arr)]


def finite_mean(values: Iterable[float]) -> float:
    """Mean over finite values; 0 when there are none."""
    finite = finite_values(values)
    if finite.size == 0:
        return 0.0
    return float(np.mean(finite))


def finite_std(values: Iterable[float]) -> float:
    """Population standard deviation over finite values; 0 when there are none."""
    finite = finite_values(values)
    if finite.size == 0:
        return 0.0
    return float(np.std(finite))


def percentile(values: Iterable[float], p: float) -> float:
    """Nearest-rank percentile of the finite values.

    Args:
        values: Sample values
        p: Probability in [0, 1]

    Returns:
        sorted_finite[min(floor(p * n), n - 1)], or 0 for an empty sample
    """
    finite = np.sort(finite_values(values))
    n = finite.size
    if n == 0:
        return 0.0
    index = int(np.floor(p * n))
    return float(finite[min(index, n - 1)])


def level_key(level: float) -> float:
    """Percentage key used for a confidence level in percentile maps."""
    return round(level * 100, 10)


def percentiles(values: Iterable[float], levels: Sequence[float]) -> Dict[float, float]:
    """Percentiles at several confidence levels, keyed by percentage."""
    finite = finite_values(values)
    return {level_key(p): percentile(finite, p) for p in levels}


def build_distribution(covenant_id: str, ratios: Sequence[RatioResult],
                       headrooms: Sequence[float], levels: Sequence[float],
                       iterations: int, metric: str = "ratio") -> ProbabilityDistribution:
    """Summarize one covenant's simulated ratios.

    Args:
        covenant_id: Covenant identifier
        ratios: Simulated ratio per iteration; unbounded ratios are excluded
        headrooms: Simulated headroom per iteration
        levels: Confidence levels to report
        iterations: Iteration count the breach probability is relative to
        metric: Name of the summarized metric

    Returns:
        ProbabilityDistribution
    """
    finite = finite_values(r.value for r in ratios if not r.is_unbounded)
    breach_count = int(np.sum(np.asarray(headrooms, dtype=float) < 0))

    return ProbabilityDistribution(
        covenant_id=covenant_id,
        metric=metric,
        mean=finite_mean(finite),
        std_dev=finite_std(finite),
        min=float(np.min(finite)) if finite.size else float("nan"),
        max=float(np.max(finite)) if finite.size else float("nan"),
        percentiles=percentiles(finite, levels),
        breach_probability=breach_count / iterations * 100,
    )


def build_portfolio_summary(headroom_series: Iterable[Sequence[float]]) -> PortfolioSummary:
    """Pool every covenant's headroom and summarize the pooled sample."""
    pooled = finite_values(h for series in headroom_series for h in series)
    return PortfolioSummary(
        mean_portfolio_headroom=finite_mean(pooled),
        std_dev_portfolio_headroom=finite_std(pooled),
        var_95=percentile(pooled, 0.05),
        var_99=percentile(pooled, 0.01),
    )
