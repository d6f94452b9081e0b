"""Monte Carlo simulation engine for covenant breach risk."""

import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .config import MonteCarloConfig, SimulationContext
from .covenants import BaseMetrics, CovenantType, RatioResult, evaluate_covenants
from .errors import SimulationCancelledError
from .rng import SeededRandom
from .sampler import CorrelatedSampler
from .statistics import (
    PortfolioSummary,
    ProbabilityDistribution,
    WorstCase,
    build_distribution,
    build_portfolio_summary,
)
from .variables import VARIABLE_METRICS

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class MonteCarloIteration:
    """Outcome of a single simulation iteration.

    Attributes:
        iteration: Zero-based iteration index
        variable_values: Sampled value per variable id
        covenant_ratios: Ratio per covenant id
        headroom_values: Headroom percentage per covenant id
        any_breach: Whether any covenant breached
        breached_covenants: Ids of breached covenants, in evaluation order
    """
    iteration: int
    variable_values: Dict[str, float]
    covenant_ratios: Dict[str, RatioResult]
    headroom_values: Dict[str, float]
    any_breach: bool
    breached_covenants: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Plain-type representation; unbounded ratios become None."""
        data = asdict(self)
        data["covenant_ratios"] = {k: r.value for k, r in self.covenant_ratios.items()}
        return data


@dataclass
class MonteCarloResult:
    """Results from a Monte Carlo run.

    Attributes:
        id: Unique run identifier
        config: The configuration used
        run_at: ISO-8601 UTC timestamp of the run
        runtime_ms: Wall-clock runtime in milliseconds
        successful_iterations: Number of iterations completed
        distributions: Dict mapping covenant id to its ratio distribution
        portfolio_breach_probability: Percentage of iterations with any breach
        expected_breaches: Average number of breached covenants per iteration
        worst_case: The iteration with the most breached covenants
        summary: Pooled headroom statistics
        random_seed: Seed actually used (drawn if the config had none)
        cancelled: Whether the run stopped early on request
        iterations: Per-iteration records, when requested
    """
    id: str
    config: MonteCarloConfig
    run_at: str
    runtime_ms: int
    successful_iterations: int
    distributions: Dict[str, ProbabilityDistribution]
    portfolio_breach_probability: float
    expected_breaches: float
    worst_case: WorstCase
    summary: PortfolioSummary
    random_seed: int
    cancelled: bool = False
    iterations: Optional[List[MonteCarloIteration]] = None

    def get_breach_probability(self, covenant_id: str) -> float:
        """Breach probability (percent) of a single covenant."""
        if covenant_id not in self.distributions:
            raise KeyError(f"Covenant '{covenant_id}' was not simulated")
        return self.distributions[covenant_id].breach_probability

    def to_dict(self) -> Dict:
        """Plain-type representation suitable for JSON encoding."""
        data = {
            "id": self.id,
            "config": self.config.to_dict(),
            "run_at": self.run_at,
            "runtime_ms": self.runtime_ms,
            "successful_iterations": self.successful_iterations,
            "distributions": {k: asdict(v) for k, v in self.distributions.items()},
            "portfolio_breach_probability": self.portfolio_breach_probability,
            "expected_breaches": self.expected_breaches,
            "worst_case": asdict(self.worst_case),
            "summary": asdict(self.summary),
            "random_seed": self.random_seed,
            "cancelled": self.cancelled,
        }
        if self.iterations is not None:
            data["iterations"] = [it.to_dict() for it in self.iterations]
        return data


def perturb_metrics(base: BaseMetrics, variable_values: Dict[str, float]) -> BaseMetrics:
    """Scale each base metric by (1 + value) of the variable that drives it.

    Metrics with no driving variable keep their base value.
    """
    factors = {
        VARIABLE_METRICS[var_id]: 1 + value
        for var_id, value in variable_values.items()
        if var_id in VARIABLE_METRICS
    }
    return base.scaled(factors)


class MonteCarloEngine:
    """Monte Carlo engine for covenant breach probabilities.

    Each iteration samples correlated variables, perturbs the base metrics,
    and evaluates every covenant in the context's threshold mapping. The
    generator is consumed sequentially by a single thread, so a fixed seed
    reproduces a run exactly.
    """

    def __init__(self, config: MonteCarloConfig):
        """Initialize the engine.

        Args:
            config: Run configuration
        """
        self.config = config
        self.sampler = CorrelatedSampler(config.variables, strict=config.strict_correlation)

    def run(self, context: SimulationContext,
            progress_callback: Optional[ProgressCallback] = None,
            cancel_event: Optional[threading.Event] = None,
            keep_iterations: bool = False) -> MonteCarloResult:
        """Run the simulation to completion.

        Args:
            context: Covenant thresholds and base metrics
            progress_callback: Optional callable invoked with
                               (completed, total) between iterations
            cancel_event: Optional event; when set, the run stops at the next
                          check and reports the iterations completed so far
            keep_iterations: Attach per-iteration records to the result

        Returns:
            MonteCarloResult
        """
        config = self.config
        total = config.iterations
        rng = SeededRandom(config.random_seed)
        covenants = [c for c in CovenantType if c in context.covenant_thresholds]

        logger.info("Starting Monte Carlo run: %d iterations, %d variables, "
                    "%d covenants, seed %d",
                    total, self.sampler.num_variables, len(covenants), rng.seed)

        start = time.perf_counter()
        ratio_series: Dict[CovenantType, List[RatioResult]] = {c: [] for c in covenants}
        headroom_series: Dict[CovenantType, List[float]] = {c: [] for c in covenants}
        records: List[MonteCarloIteration] = []
        worst: Optional[MonteCarloIteration] = None
        total_breaches = 0
        breach_iterations = 0
        completed = 0
        cancelled = False

        check_interval = max(1, total // 100)

        for i in range(total):
            if i % check_interval == 0:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Cancellation requested at iteration %d/%d", i, total)
                    cancelled = True
                    break
                if progress_callback is not None:
                    progress_callback(i, total)

            iteration = self._run_iteration(i, rng, context)

            for covenant in covenants:
                ratio_series[covenant].append(iteration.covenant_ratios[covenant.value])
                headroom_series[covenant].append(iteration.headroom_values[covenant.value])

            total_breaches += len(iteration.breached_covenants)
            if iteration.any_breach:
                breach_iterations += 1
            if worst is None or len(iteration.breached_covenants) > len(worst.breached_covenants):
                worst = iteration
            if keep_iterations:
                records.append(iteration)
            completed = i + 1

        if completed == 0:
            raise SimulationCancelledError("Simulation cancelled before any iteration completed")

        if progress_callback is not None and not cancelled:
            progress_callback(completed, total)

        distributions = {
            covenant.value: build_distribution(
                covenant.value,
                ratio_series[covenant],
                headroom_series[covenant],
                config.confidence_levels,
                completed,
            )
            for covenant in covenants
        }

        runtime_ms = int(round((time.perf_counter() - start) * 1000))
        result = MonteCarloResult(
            id=f"mc-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            config=config,
            run_at=datetime.now(timezone.utc).isoformat(),
            runtime_ms=runtime_ms,
            successful_iterations=completed,
            distributions=distributions,
            portfolio_breach_probability=breach_iterations / completed * 100,
            expected_breaches=total_breaches / completed,
            worst_case=WorstCase(
                breach_count=len(worst.breached_covenants),
                affected_covenants=list(worst.breached_covenants),
            ),
            summary=build_portfolio_summary(headroom_series.values()),
            random_seed=rng.seed,
            cancelled=cancelled,
            iterations=records if keep_iterations else None,
        )

        logger.info("Monte Carlo run %s finished: %d iterations in %d ms, "
                    "portfolio breach probability %.2f%%",
                    result.id, completed, runtime_ms, result.portfolio_breach_probability)
        return result

    def _run_iteration(self, index: int, rng: SeededRandom,
                       context: SimulationContext) -> MonteCarloIteration:
        """Sample, perturb and evaluate a single iteration."""
        values = self.sampler.sample(rng)
        metrics = perturb_metrics(context.base_metrics, values)
        evaluations = evaluate_covenants(metrics, context.covenant_thresholds,
                                         self.config.denominator_policy)

        ratios = {}
        headrooms = {}
        breached = []
        for covenant, evaluation in evaluations.items():
            ratios[covenant.value] = evaluation.ratio
            headrooms[covenant.value] = evaluation.headroom
            if evaluation.breached:
                breached.append(covenant.value)

        return MonteCarloIteration(
            iteration=index,
            variable_values=values,
            covenant_ratios=ratios,
            headroom_values=headrooms,
            any_breach=bool(breached),
            breached_covenants=breached,
        )


def run_monte_carlo_simulation(config: MonteCarloConfig, context: SimulationContext,
                               progress_callback: Optional[ProgressCallback] = None,
                               cancel_event: Optional[threading.Event] = None,
                               keep_iterations: bool = False) -> MonteCarloResult:
    """Run a Monte Carlo covenant simulation.

    Args:
        config: Run configuration
        context: Covenant thresholds and base metrics
        progress_callback: Optional (completed, total) progress hook
        cancel_event: Optional cooperative cancellation event
        keep_iterations: Attach per-iteration records to the result

    Returns:
        MonteCarloResult
    """
    engine = MonteCarloEngine(config)
    return engine.run(context, progress_callback=progress_callback,
                      cancel_event=cancel_event, keep_iterations=keep_iterations)
