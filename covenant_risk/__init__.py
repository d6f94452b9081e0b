"""Monte Carlo covenant-risk simulation engine.

This package draws correlated random scenarios over financial risk variables,
propagates them through covenant-ratio formulas, and reports breach
probabilities and headroom distributions.

Main components:
- variables: Simulation variables and the metrics they perturb
- correlation / sampler: Correlation matrix, Cholesky factor, correlated draws
- covenants: Covenant ratios, headroom and breach logic
- simulation: Monte Carlo engine and results
- scenario: Deterministic what-if scenario impact
- reports: DataFrame reports over results
"""

from .lib.errors import (
    CovenantRiskError,
    InvalidConfigurationError,
    InconsistentCorrelationMatrixError,
    NonPositiveDenominatorError,
    SimulationCancelledError,
)
from .lib.rng import SeededRandom
from .lib.variables import DistributionType, SimulationVariable, VARIABLE_METRICS
from .lib.correlation import (
    build_correlation_matrix,
    cholesky_decomposition,
    validate_correlation_matrix,
)
from .lib.sampler import CorrelatedSampler, normal_cdf
from .lib.covenants import (
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
from .lib.config import (
    MonteCarloConfig,
    SimulationContext,
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_ITERATIONS,
)
from .lib.statistics import PortfolioSummary, ProbabilityDistribution, WorstCase, percentile
from .lib.simulation import (
    MonteCarloEngine,
    MonteCarloIteration,
    MonteCarloResult,
    run_monte_carlo_simulation,
)
from .lib.scenario import ScenarioImpactParams, calculate_scenario_impact
from .lib.reports import (
    create_distribution_report,
    create_iteration_frame,
    create_scenario_report,
)

__version__ = "1.0.0"

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
