#!/usr/bin/env python3
"""Example usage of the covenant risk Monte Carlo engine.

This script demonstrates:
1. Defining base metrics and covenant thresholds for a borrower
2. Defining correlated simulation variables
3. Running a Monte Carlo simulation
4. Reporting per-covenant breach distributions
5. Deterministic what-if scenarios
6. Checking the zero-variance case against the baseline scenario
"""

import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from covenant_risk import (
    BaseMetrics,
    CovenantThreshold,
    MonteCarloConfig,
    ScenarioImpactParams,
    SimulationContext,
    SimulationVariable,
    calculate_scenario_impact,
    create_distribution_report,
    create_scenario_report,
    run_monte_carlo_simulation,
)


def create_sample_context() -> SimulationContext:
    """Create a borrower with five financial covenants."""
    metrics = BaseMetrics(
        total_debt=250_000_000,
        ebitda=62_500_000,
        interest_expense=15_000_000,
        fixed_charges=28_000_000,
        net_operating_income=45_000_000,
        total_debt_service=32_000_000,
        liquidity=40_000_000,
    )

    return SimulationContext(
        base_metrics=metrics,
        covenant_thresholds={
            "leverage_ratio": CovenantThreshold(4.5, "maximum"),
            "interest_coverage": CovenantThreshold(3.0, "minimum"),
            "fixed_charge_coverage": CovenantThreshold(1.25, "minimum"),
            "debt_service_coverage": CovenantThreshold(1.2, "minimum"),
            "minimum_liquidity": CovenantThreshold(25_000_000, "minimum"),
        },
    )


def create_sample_variables():
    """Create correlated risk drivers for a moderate downturn."""
    return [
        SimulationVariable(
            id="ebitda_change", name="EBITDA Change", distribution="normal",
            base_value=-0.05, std_dev=0.15,
            correlations={"rate_change": 0.3, "noi_change": 0.8, "liquidity_change": 0.5},
        ),
        SimulationVariable(
            id="rate_change", name="Interest Rate Change", distribution="triangular",
            min_value=-0.1, max_value=0.4, mode_value=0.1,
        ),
        SimulationVariable(
            id="noi_change", name="NOI Change", distribution="normal",
            base_value=-0.03, std_dev=0.12,
        ),
        SimulationVariable(
            id="liquidity_change", name="Liquidity Change", distribution="uniform",
            min_value=-0.3, max_value=0.1,
        ),
    ]


def main():
    """Run the complete covenant risk example."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("COVENANT RISK MONTE CARLO ENGINE - EXAMPLE")
    print("=" * 70)

    print("\n1. Creating borrower context...")
    context = create_sample_context()
    print(f"   Covenants: {[c.value for c in context.covenant_thresholds]}")
    print("   Baseline:")
    baseline = calculate_scenario_impact(ScenarioImpactParams(), context)
    print(create_scenario_report(baseline).to_string(index=False))

    print("\n2. Defining simulation variables...")
    variables = create_sample_variables()
    for variable in variables:
        print(f"   - {variable.name}: {variable.distribution.value}")

    print("\n3. Running Monte Carlo simulation...")
    config = MonteCarloConfig(variables=variables, iterations=10_000, random_seed=42)
    result = run_monte_carlo_simulation(config, context)
    print(f"   Iterations: {result.successful_iterations:,}")
    print(f"   Runtime: {result.runtime_ms} ms")
    print(f"   Portfolio breach probability: {result.portfolio_breach_probability:.2f}%")
    print(f"   Expected breaches per iteration: {result.expected_breaches:.3f}")
    print(f"   Worst case: {result.worst_case.breach_count} breaches "
          f"({', '.join(result.worst_case.affected_covenants)})")
    print(f"   Mean pooled headroom: {result.summary.mean_portfolio_headroom:.1f}%")
    print(f"   Headroom VaR (95%): {result.summary.var_95:.1f}%")
    print(f"   Headroom VaR (99%): {result.summary.var_99:.1f}%")

    print("\n4. Per-covenant distributions (sorted by breach probability):")
    print("-" * 70)
    print(create_distribution_report(result).to_string(index=False))

    print("\n5. Deterministic scenarios...")
    scenarios = {
        "Rate shock (+300bps)": ScenarioImpactParams(rate_change_bps=300),
        "EBITDA decline (-25%)": ScenarioImpactParams(ebitda_change=-25),
        "Combined stress": ScenarioImpactParams(ebitda_change=-20, rate_change_bps=200,
                                                debt_change=10, revenue_change=-15),
    }
    for name, params in scenarios.items():
        impact = calculate_scenario_impact(params, context)
        breached = [cid for cid, v in impact.items() if v["headroom"] < 0]
        print(f"\n   {name}: {len(breached)} breach(es)")
        print(create_scenario_report(impact).to_string(index=False))

    print("\n6. Verification checks...")
    degenerate = MonteCarloConfig(
        variables=[SimulationVariable(id="ebitda_change", distribution="normal", std_dev=0.0)],
        iterations=100,
        random_seed=1,
    )
    flat = run_monte_carlo_simulation(degenerate, context)
    matches = all(
        flat.distributions[cid].min == v["ratio"].value == flat.distributions[cid].max
        for cid, v in baseline.items()
    )
    if matches:
        print("   [PASS] Zero-variance simulation matches the baseline scenario")
    else:
        print("   [FAIL] Zero-variance simulation diverges from the baseline scenario")

    print("\n" + "=" * 70)
    print("SIMULATION COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
