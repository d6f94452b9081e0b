"""Covenant ratios, headroom and breach logic."""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Mapping, Optional

from .errors import InvalidConfigurationError, NonPositiveDenominatorError


class CovenantType(str, Enum):
    """Covenant tests the engine knows how to evaluate, in evaluation order."""
    LEVERAGE_RATIO = "leverage_ratio"
    INTEREST_COVERAGE = "interest_coverage"
    FIXED_CHARGE_COVERAGE = "fixed_charge_coverage"
    DEBT_SERVICE_COVERAGE = "debt_service_coverage"
    MINIMUM_LIQUIDITY = "minimum_liquidity"


class ThresholdType(str, Enum):
    """Direction of a covenant threshold."""
    MAXIMUM = "maximum"
    MINIMUM = "minimum"


class DenominatorPolicy(str, Enum):
    """What a ratio does when its denominator is zero or negative.

    SENTINEL reports the ratio as safely unbounded; RAISE raises
    NonPositiveDenominatorError.
    """
    SENTINEL = "sentinel"
    RAISE = "raise"


@dataclass(frozen=True)
class CovenantThreshold:
    """Contractual threshold for a single covenant.

    Attributes:
        threshold: Threshold value (must be positive)
        threshold_type: Whether the ratio must stay below (maximum) or above (minimum)
    """
    threshold: float
    threshold_type: ThresholdType

    def __post_init__(self):
        try:
            object.__setattr__(self, "threshold_type", ThresholdType(self.threshold_type))
        except ValueError:
            raise InvalidConfigurationError(
                f"Threshold type must be 'maximum' or 'minimum', got '{self.threshold_type}'"
            ) from None
        if not self.threshold > 0:
            raise InvalidConfigurationError(
                f"Covenant threshold must be positive, got {self.threshold}"
            )


@dataclass(frozen=True)
class BaseMetrics:
    """Financial metrics snapshot the covenant ratios are computed from."""
    total_debt: float
    ebitda: float
    interest_expense: float
    fixed_charges: float
    net_operating_income: float
    total_debt_service: float
    liquidity: float

    def scaled(self, factors: Mapping[str, float]) -> "BaseMetrics":
        """Return a copy with each named metric multiplied by its factor."""
        return replace(self, **{
            name: getattr(self, name) * factor for name, factor in factors.items()
        })


@dataclass(frozen=True)
class RatioResult:
    """A covenant ratio that is either finite or safely unbounded.

    An unbounded ratio comes from a non-positive denominator. It carries no
    numeric value; ``as_float`` exposes it as +inf for headroom arithmetic.
    """
    value: Optional[float]

    @classmethod
    def finite(cls, value: float) -> "RatioResult":
        return cls(value=value)

    @classmethod
    def safely_unbounded(cls) -> "RatioResult":
        return cls(value=None)

    @property
    def is_unbounded(self) -> bool:
        return self.value is None

    def as_float(self) -> float:
        return math.inf if self.value is None else self.value

    def __repr__(self) -> str:
        if self.is_unbounded:
            return "RatioResult(SafelyUnbounded)"
        return f"RatioResult({self.value:.6g})"


@dataclass(frozen=True)
class CovenantEvaluation:
    """Ratio, headroom and breach flag for one covenant under one metrics snapshot."""
    covenant: CovenantType
    ratio: RatioResult
    headroom: float

    @property
    def breached(self) -> bool:
        return is_breach(self.headroom)


def _ratio(name: str, numerator: float, denominator: float,
           policy: DenominatorPolicy) -> RatioResult:
    if denominator <= 0:
        if policy == DenominatorPolicy.RAISE:
            raise NonPositiveDenominatorError(name, denominator)
        return RatioResult.safely_unbounded()
    return RatioResult.finite(numerator / denominator)


def leverage_ratio(total_debt: float, ebitda: float,
                   policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> RatioResult:
    """Total debt / EBITDA."""
    return _ratio(CovenantType.LEVERAGE_RATIO.value, total_debt, ebitda, policy)


def interest_coverage(ebitda: float, interest_expense: float,
                      policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> RatioResult:
    """EBITDA / interest expense."""
    return _ratio(CovenantType.INTEREST_COVERAGE.value, ebitda, interest_expense, policy)


def fixed_charge_coverage(ebitda: float, fixed_charges: float,
                          policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> RatioResult:
    """EBITDA / fixed charges."""
    return _ratio(CovenantType.FIXED_CHARGE_COVERAGE.value, ebitda, fixed_charges, policy)


def debt_service_coverage(net_operating_income: float, total_debt_service: float,
                          policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> RatioResult:
    """Net operating income / total debt service."""
    return _ratio(CovenantType.DEBT_SERVICE_COVERAGE.value,
                  net_operating_income, total_debt_service, policy)


def calculate_ratio(covenant: CovenantType, metrics: BaseMetrics,
                    policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> RatioResult:
    """Compute the ratio for a covenant type from a metrics snapshot."""
    if covenant == CovenantType.LEVERAGE_RATIO:
        return leverage_ratio(metrics.total_debt, metrics.ebitda, policy)
    if covenant == CovenantType.INTEREST_COVERAGE:
        return interest_coverage(metrics.ebitda, metrics.interest_expense, policy)
    if covenant == CovenantType.FIXED_CHARGE_COVERAGE:
        return fixed_charge_coverage(metrics.ebitda, metrics.fixed_charges, policy)
    if covenant == CovenantType.DEBT_SERVICE_COVERAGE:
        return debt_service_coverage(metrics.net_operating_income,
                                     metrics.total_debt_service, policy)
    if covenant == CovenantType.MINIMUM_LIQUIDITY:
        return RatioResult.finite(metrics.liquidity)
    raise InvalidConfigurationError(f"Unknown covenant type: {covenant}")


def calculate_headroom(ratio: float, threshold: CovenantThreshold,
                       covenant: Optional[CovenantType] = None) -> float:
    """Signed headroom in percent of the threshold; negative means breach.

    Args:
        ratio: Covenant ratio (+inf for a safely unbounded ratio)
        threshold: The covenant threshold
        covenant: Covenant type; minimum liquidity always uses the minimum form

    Returns:
        Headroom percentage
    """
    t = threshold.threshold
    if (covenant == CovenantType.MINIMUM_LIQUIDITY
            or threshold.threshold_type == ThresholdType.MINIMUM):
        return (ratio - t) / t * 100
    return (t - ratio) / t * 100


def is_breach(headroom: float) -> bool:
    return headroom < 0


def evaluate_covenant(covenant: CovenantType, metrics: BaseMetrics,
                      threshold: CovenantThreshold,
                      policy: DenominatorPolicy = DenominatorPolicy.SENTINEL) -> CovenantEvaluation:
    """Evaluate a single covenant against a metrics snapshot."""
    ratio = calculate_ratio(covenant, metrics, policy)
    headroom = calculate_headroom(ratio.as_float(), threshold, covenant)
    return CovenantEvaluation(covenant=covenant, ratio=ratio, headroom=headroom)


def evaluate_covenants(metrics: BaseMetrics,
                       thresholds: Mapping[CovenantType, CovenantThreshold],
                       policy: DenominatorPolicy = DenominatorPolicy.SENTINEL
                       ) -> Dict[CovenantType, CovenantEvaluation]:
    """Evaluate every covenant present in the threshold mapping.

    Covenants are evaluated in CovenantType order; covenants absent from the
    mapping are skipped.

    Args:
        metrics: Metrics snapshot
        thresholds: Dict mapping covenant type to its threshold
        policy: Non-positive denominator policy

    Returns:
        Dict mapping covenant type to its evaluation
    """
    return {
        covenant: evaluate_covenant(covenant, metrics, thresholds[covenant], policy)
        for covenant in CovenantType
        if covenant in thresholds
    }
