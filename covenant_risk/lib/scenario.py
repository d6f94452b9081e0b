"""Deterministic what-if scenario evaluation."""

from dataclasses import dataclass
from typing import Dict, Mapping, Union

from .config import SimulationContext
from .covenants import BaseMetrics, DenominatorPolicy, RatioResult, evaluate_covenants
from .errors import InvalidConfigurationError

# Share of a revenue change that flows through to liquidity
LIQUIDITY_REVENUE_FLOW_THROUGH = 0.3


@dataclass(frozen=True)
class ScenarioImpactParams:
    """Point shifts applied to the base metrics.

    Attributes:
        ebitda_change: EBITDA change in percent (also applied to net operating income)
        rate_change_bps: Interest rate change in basis points
        debt_change: Total debt change in percent
        revenue_change: Revenue change in percent
    """
    ebitda_change: float = 0.0
    rate_change_bps: float = 0.0
    debt_change: float = 0.0
    revenue_change: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping) -> "ScenarioImpactParams":
        known = {"ebitda_change", "rate_change_bps", "debt_change", "revenue_change"}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown scenario parameters: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in data.items()})


def apply_scenario(params: ScenarioImpactParams, base: BaseMetrics) -> BaseMetrics:
    """Shifted metrics snapshot for a scenario.

    Interest expense and fixed charges move with the rate shift, debt service
    is held constant, and liquidity absorbs part of the revenue change.
    """
    rate_factor = 1 + params.rate_change_bps / 10000
    ebitda_factor = 1 + params.ebitda_change / 100
    return base.scaled({
        "total_debt": 1 + params.debt_change / 100,
        "ebitda": ebitda_factor,
        "interest_expense": rate_factor,
        "fixed_charges": rate_factor,
        "net_operating_income": ebitda_factor,
        "liquidity": 1 + params.revenue_change / 100 * LIQUIDITY_REVENUE_FLOW_THROUGH,
    })


def calculate_scenario_impact(params: ScenarioImpactParams, context: SimulationContext,
                              policy: DenominatorPolicy = DenominatorPolicy.SENTINEL
                              ) -> Dict[str, Dict[str, Union[RatioResult, float]]]:
    """Evaluate a single deterministic scenario.

    Uses the same covenant evaluation as the Monte Carlo engine, so a
    zero-shift scenario matches a zero-variance simulation exactly.

    Args:
        params: Scenario shifts
        context: Covenant thresholds and base metrics
        policy: Non-positive denominator policy

    Returns:
        Dict mapping covenant id to {'ratio': RatioResult, 'headroom': float}
    """
    metrics = apply_scenario(params, context.base_metrics)
    evaluations = evaluate_covenants(metrics, context.covenant_thresholds, policy)
    return {
        covenant.value: {
            "ratio": evaluation.ratio,
            "headroom": evaluation.headroom,
        }
        for covenant, evaluation in evaluations.items()
    }
