"""Run configuration and simulation context."""

import logging
import numbers
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from .covenants import (
    BaseMetrics,
    CovenantThreshold,
    CovenantType,
    DenominatorPolicy,
)
from .errors import InvalidConfigurationError
from .variables import VARIABLE_METRICS, SimulationVariable

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10000
DEFAULT_CONFIDENCE_LEVELS = (0.05, 0.25, 0.5, 0.75, 0.95)


@dataclass(frozen=True)
class MonteCarloConfig:
    """Immutable input to a single Monte Carlo run.

    Attributes:
        variables: Variables to simulate, in sampling order
        iterations: Number of iterations (positive integer)
        confidence_levels: Percentile levels to report, each in (0, 1)
        random_seed: Seed for reproducibility (None draws a fresh one)
        strict_correlation: Reject invalid correlation matrices instead of clamping
        denominator_policy: Handling of non-positive ratio denominators
        allow_unmapped_variables: Accept variables that perturb no base metric
    """
    variables: Tuple[SimulationVariable, ...]
    iterations: int = DEFAULT_ITERATIONS
    confidence_levels: Tuple[float, ...] = DEFAULT_CONFIDENCE_LEVELS
    random_seed: Optional[int] = None
    strict_correlation: bool = False
    denominator_policy: DenominatorPolicy = DenominatorPolicy.SENTINEL
    allow_unmapped_variables: bool = False

    def __post_init__(self):
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "confidence_levels", tuple(self.confidence_levels))
        try:
            object.__setattr__(self, "denominator_policy",
                               DenominatorPolicy(self.denominator_policy))
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown denominator policy '{self.denominator_policy}'"
            ) from None

        if (isinstance(self.iterations, bool)
                or not isinstance(self.iterations, numbers.Integral)
                or self.iterations <= 0):
            raise InvalidConfigurationError(
                f"Iterations must be a positive integer, got {self.iterations!r}"
            )

        if self.random_seed is not None and (
                isinstance(self.random_seed, bool)
                or not isinstance(self.random_seed, numbers.Integral)):
            raise InvalidConfigurationError(
                f"Random seed must be an integer, got {self.random_seed!r}"
            )

        for level in self.confidence_levels:
            if not 0 < level < 1:
                raise InvalidConfigurationError(
                    f"Confidence levels must be strictly between 0 and 1, got {level}"
                )

        if not self.variables:
            raise InvalidConfigurationError("At least one simulation variable is required")

        seen = set()
        for variable in self.variables:
            if variable.id in seen:
                raise InvalidConfigurationError(f"Duplicate variable id '{variable.id}'")
            seen.add(variable.id)
            if not self.allow_unmapped_variables and variable.id not in VARIABLE_METRICS:
                raise InvalidConfigurationError(
                    f"Variable '{variable.id}' does not perturb any metric. "
                    f"Choose from: {sorted(VARIABLE_METRICS)}"
                )

    @classmethod
    def from_dict(cls, data: Mapping) -> "MonteCarloConfig":
        """Build a config from an application payload.

        Args:
            data: Dict with 'variables' and optional 'iterations',
                  'confidence_levels', 'random_seed', 'strict_correlation',
                  'denominator_policy' and 'allow_unmapped_variables' keys

        Returns:
            MonteCarloConfig
        """
        variables = [SimulationVariable.from_dict(v) for v in data.get("variables", [])]
        return cls(
            variables=tuple(variables),
            iterations=data.get("iterations", DEFAULT_ITERATIONS),
            confidence_levels=tuple(data.get("confidence_levels", DEFAULT_CONFIDENCE_LEVELS)),
            random_seed=data.get("random_seed"),
            strict_correlation=bool(data.get("strict_correlation", False)),
            denominator_policy=data.get("denominator_policy", DenominatorPolicy.SENTINEL),
            allow_unmapped_variables=bool(data.get("allow_unmapped_variables", False)),
        )

    def to_dict(self) -> Dict:
        return {
            "iterations": self.iterations,
            "confidence_levels": list(self.confidence_levels),
            "random_seed": self.random_seed,
            "strict_correlation": self.strict_correlation,
            "denominator_policy": self.denominator_policy.value,
            "allow_unmapped_variables": self.allow_unmapped_variables,
            "variables": [
                {
                    "id": v.id,
                    "name": v.name,
                    "distribution": v.distribution.value,
                    "base_value": v.base_value,
                    "std_dev": v.std_dev,
                    "min_value": v.min_value,
                    "max_value": v.max_value,
                    "mode_value": v.mode_value,
                    "correlations": dict(v.correlations),
                }
                for v in self.variables
            ],
        }


@dataclass(frozen=True)
class SimulationContext:
    """Covenant thresholds and base metrics supplied fresh for each run.

    Attributes:
        base_metrics: Unperturbed financial metrics
        covenant_thresholds: Dict mapping covenant type to its threshold;
                             covenants absent here are not evaluated, and
                             ids the engine has no formula for are dropped
    """
    base_metrics: BaseMetrics
    covenant_thresholds: Dict[CovenantType, CovenantThreshold] = field(default_factory=dict)

    def __post_init__(self):
        thresholds = {}
        for covenant_id, threshold in self.covenant_thresholds.items():
            covenant = _known_covenant(covenant_id)
            if covenant is not None:
                thresholds[covenant] = threshold
        object.__setattr__(self, "covenant_thresholds", thresholds)

    def __hash__(self):
        return hash((self.base_metrics, tuple(self.covenant_thresholds.items())))

    @classmethod
    def from_dict(cls, data: Mapping) -> "SimulationContext":
        """Build a context from an application payload.

        Args:
            data: Dict with 'base_metrics' (one key per BaseMetrics field) and
                  'covenant_thresholds' ({covenant_id: {'threshold', 'type'}})

        Returns:
            SimulationContext
        """
        try:
            metrics = BaseMetrics(**{
                name: float(value) for name, value in data["base_metrics"].items()
            })
        except (KeyError, TypeError) as exc:
            raise InvalidConfigurationError(f"Invalid base metrics: {exc}") from None

        thresholds = {}
        for covenant_id, entry in data.get("covenant_thresholds", {}).items():
            if _known_covenant(covenant_id) is None:
                continue
            try:
                thresholds[covenant_id] = CovenantThreshold(
                    threshold=float(entry["threshold"]),
                    threshold_type=entry["type"],
                )
            except KeyError as exc:
                raise InvalidConfigurationError(
                    f"Threshold for '{covenant_id}' missing key {exc}"
                ) from None

        return cls(base_metrics=metrics, covenant_thresholds=thresholds)


def _known_covenant(covenant_id) -> Optional[CovenantType]:
    try:
        return CovenantType(covenant_id)
    except ValueError:
        logger.debug("Ignoring threshold for unsupported covenant '%s'", covenant_id)
        return None
