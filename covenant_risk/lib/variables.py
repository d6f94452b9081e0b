"""Simulation variables and the metrics they perturb."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .errors import InvalidConfigurationError


class DistributionType(str, Enum):
    """Supported marginal distributions for a simulation variable."""
    NORMAL = "normal"
    UNIFORM = "uniform"
    TRIANGULAR = "triangular"
    LOGNORMAL = "lognormal"


# Variable id -> base metric it scales by (1 + value)
VARIABLE_METRICS: Dict[str, str] = {
    "debt_change": "total_debt",
    "ebitda_change": "ebitda",
    "rate_change": "interest_expense",
    "fixed_charge_change": "fixed_charges",
    "noi_change": "net_operating_income",
    "debt_service_change": "total_debt_service",
    "liquidity_change": "liquidity",
}

DEFAULT_LOGNORMAL_STD = 0.1


@dataclass(frozen=True)
class SimulationVariable:
    """A single risk driver sampled in each iteration.

    Attributes:
        id: Variable identifier (e.g. 'ebitda_change')
        distribution: Marginal distribution of the variable
        base_value: Base/expected value; the mean for normal and lognormal
        std_dev: Standard deviation (normal, lognormal)
        min_value: Lower bound (uniform, triangular)
        max_value: Upper bound (uniform, triangular)
        mode_value: Most likely value (triangular)
        correlations: Dict mapping other variable ids to correlation coefficients
        name: Optional human-readable name
    """
    id: str
    distribution: DistributionType
    base_value: float = 0.0
    std_dev: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    mode_value: Optional[float] = None
    correlations: Dict[str, float] = field(default_factory=dict)
    name: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise InvalidConfigurationError("Variable id must be a non-empty string")

        try:
            distribution = DistributionType(self.distribution)
        except ValueError:
            raise InvalidConfigurationError(
                f"Unsupported distribution '{self.distribution}' for variable '{self.id}'"
            ) from None
        object.__setattr__(self, "distribution", distribution)
        object.__setattr__(self, "correlations", dict(self.correlations))

        for other_id, rho in self.correlations.items():
            if not -1 <= rho <= 1:
                raise InvalidConfigurationError(
                    f"Correlation between '{self.id}' and '{other_id}' must be "
                    f"between -1 and 1, got {rho}"
                )

        if self.std_dev is not None and self.std_dev < 0:
            raise InvalidConfigurationError(
                f"Std dev must be non-negative for variable '{self.id}', got {self.std_dev}"
            )

        if distribution == DistributionType.UNIFORM:
            if self.upper_bound < self.lower_bound:
                raise InvalidConfigurationError(
                    f"Uniform variable '{self.id}' needs min <= max"
                )
        elif distribution == DistributionType.TRIANGULAR:
            if not self.lower_bound < self.upper_bound:
                raise InvalidConfigurationError(
                    f"Triangular variable '{self.id}' needs min < max"
                )
            if not self.lower_bound <= self.mode <= self.upper_bound:
                raise InvalidConfigurationError(
                    f"Triangular variable '{self.id}' needs min <= mode <= max, "
                    f"got mode {self.mode}"
                )
        elif distribution == DistributionType.LOGNORMAL:
            if self.base_value <= 0:
                raise InvalidConfigurationError(
                    f"Lognormal variable '{self.id}' needs a positive base value, "
                    f"got {self.base_value}"
                )

    def __hash__(self):
        return hash((self.id, self.distribution, self.base_value, self.std_dev,
                     self.min_value, self.max_value, self.mode_value,
                     tuple(sorted(self.correlations.items())), self.name))

    @property
    def lower_bound(self) -> float:
        return 0.0 if self.min_value is None else self.min_value

    @property
    def upper_bound(self) -> float:
        return 1.0 if self.max_value is None else self.max_value

    @property
    def mode(self) -> float:
        return self.base_value if self.mode_value is None else self.mode_value

    @property
    def spread(self) -> float:
        """Std dev used in sampling, with the per-distribution default applied."""
        if self.std_dev is not None:
            return self.std_dev
        if self.distribution == DistributionType.LOGNORMAL:
            return DEFAULT_LOGNORMAL_STD
        return 0.0

    @property
    def target_metric(self) -> Optional[str]:
        """Base metric this variable perturbs, or None if it perturbs nothing."""
        return VARIABLE_METRICS.get(self.id)

    @classmethod
    def from_dict(cls, data: Dict) -> "SimulationVariable":
        """Build a variable from an application payload.

        Args:
            data: Dict with 'id', 'distribution' and optional 'base_value',
                  'std_dev', 'min_value', 'max_value', 'mode_value',
                  'correlations' and 'name' keys

        Returns:
            SimulationVariable
        """
        try:
            return cls(
                id=data["id"],
                distribution=data["distribution"],
                base_value=float(data.get("base_value", 0.0)),
                std_dev=data.get("std_dev"),
                min_value=data.get("min_value"),
                max_value=data.get("max_value"),
                mode_value=data.get("mode_value"),
                correlations=data.get("correlations") or {},
                name=data.get("name"),
            )
        except KeyError as exc:
            raise InvalidConfigurationError(
                f"Variable definition missing required key {exc}"
            ) from None
