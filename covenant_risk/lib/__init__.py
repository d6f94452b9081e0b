"""Core library modules for covenant risk simulation.

This subpackage contains the core implementation:
- rng: Seeded pseudorandom generator
- variables: Simulation variables and metric mapping
- correlation: Correlation matrix and Cholesky factorization
- sampler: Correlated variable sampling
- covenants: Covenant ratios, headroom and breach logic
- config: Run configuration and simulation context
- simulation: Monte Carlo engine
- statistics: Distribution and portfolio statistics
- scenario: Deterministic scenario impact
- reports: DataFrame reports
"""

from .errors import (
    CovenantRiskError,
    InvalidConfigurationError,
    InconsistentCorrelationMatrixError,
    NonPositiveDenominatorError,
    SimulationCancelledError,
)
from .rng import SeededRandom
from .variables import DistributionType, SimulationVariable, VARIABLE_METRICS
from .correlation import (
    build_correlation_matrix,
    cholesky_decomposition,
    validate_correlation_matrix,
)
from .sampler import CorrelatedSampler, normal_cdf
from .covenants import (
    BaseMetrics,
    CovenantEvaluation,
    CovenantThreshold,
    CovenantType,
    DenominatorPolicy,
    RatioResult,
    ThresholdType,
    calculate_headroom,
    evaluate_covenants,
)
from .config import (
    MonteCarloConfig,
    SimulationContext,
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_ITERATIONS,
)
from .statistics import PortfolioSummary, ProbabilityDistribution, WorstCase, percentile
from .simulation import (
    MonteCarloEngine,
    MonteCarloIteration,
    MonteCarloResult,
    run_monte_carlo_simulation,
)
from .scenario import ScenarioImpactParams, calculate_scenario_impact
from .reports import (
    create_distribution_report,
    create_iteration_frame,
    create_scenario_report,
)

__all__ = [
    # Errors
    "CovenantRiskError",
    "InvalidConfigurationError",
    "InconsistentCorrelationMatrixError",
    "NonPositiveDenominatorError",
    "SimulationCancelledError",
    # Sampling
    "SeededRandom",
    "DistributionType",
    "SimulationVariable",
    "VARIABLE_METRICS",
    "build_correlation_matrix",
    "cholesky_decomposition",
    "validate_correlation_matrix",
    "CorrelatedSampler",
    "normal_cdf",
    # Covenants
    "BaseMetrics",
    "CovenantEvaluation",
    "CovenantThreshold",
    "CovenantType",
    "DenominatorPolicy",
    "RatioResult",
    "ThresholdType",
    "calculate_headroom",
    "evaluate_covenants",
    # Configuration
    "MonteCarloConfig",
    "SimulationContext",
    "DEFAULT_CONFIDENCE_LEVELS",
    "DEFAULT_ITERATIONS",
    # Statistics
    "PortfolioSummary",
    "ProbabilityDistribution",
    "WorstCase",
    "percentile",
    # Simulation
    "MonteCarloEngine",
    "MonteCarloIteration",
    "MonteCarloResult",
    "run_monte_carlo_simulation",
    # Scenarios
    "ScenarioImpactParams",
    "calculate_scenario_impact",
    # Reports
    "create_distribution_report",
    "create_iteration_frame",
    "create_scenario_report",
]
