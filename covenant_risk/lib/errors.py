"""Exception types raised by the covenant risk engine."""


class CovenantRiskError(Exception):
    """Base class for all engine errors."""


class InvalidConfigurationError(CovenantRiskError, ValueError):
    """Raised when a simulation configuration or context is invalid."""


class InconsistentCorrelationMatrixError(CovenantRiskError, ValueError):
    """Raised in strict mode when a correlation matrix cannot be factored as given."""


class NonPositiveDenominatorError(CovenantRiskError, ArithmeticError):
    """Raised when a ratio denominator is <= 0 and the policy forbids the sentinel."""

    def __init__(self, ratio_name: str, denominator: float):
        self.ratio_name = ratio_name
        self.denominator = denominator
        super().__init__(
            f"Non-positive denominator for {ratio_name}: {denominator}"
        )


class SimulationCancelledError(CovenantRiskError):
    """Raised when a run is cancelled before any iteration completed."""
