"""Pytest fixtures for covenant risk engine tests."""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from covenant_risk import (
    BaseMetrics,
    CovenantThreshold,
    MonteCarloConfig,
    SimulationContext,
    SimulationVariable,
)


@pytest.fixture
def base_metrics():
    """Base metrics with leverage 4.0x, interest coverage 5.0x."""
    return BaseMetrics(
        total_debt=200.0,
        ebitda=50.0,
        interest_expense=10.0,
        fixed_charges=20.0,
        net_operating_income=40.0,
        total_debt_service=25.0,
        liquidity=30.0,
    )


@pytest.fixture
def leverage_context(base_metrics):
    """Context with a single maximum-leverage covenant at 4.5x."""
    return SimulationContext(
        base_metrics=base_metrics,
        covenant_thresholds={
            "leverage_ratio": CovenantThreshold(4.5, "maximum"),
        },
    )


@pytest.fixture
def full_context(base_metrics):
    """Context covering every covenant type."""
    return SimulationContext(
        base_metrics=base_metrics,
        covenant_thresholds={
            "leverage_ratio": CovenantThreshold(4.5, "maximum"),
            "interest_coverage": CovenantThreshold(3.0, "minimum"),
            "fixed_charge_coverage": CovenantThreshold(1.25, "minimum"),
            "debt_service_coverage": CovenantThreshold(1.2, "minimum"),
            "minimum_liquidity": CovenantThreshold(20.0, "minimum"),
        },
    )


@pytest.fixture
def ebitda_variable():
    """EBITDA shock ~ N(0, 10%)."""
    return SimulationVariable(
        id="ebitda_change",
        distribution="normal",
        base_value=0.0,
        std_dev=0.1,
    )


@pytest.fixture
def correlated_variables():
    """EBITDA and rate shocks with 0.3 correlation, plus a uniform debt shock."""
    return [
        SimulationVariable(
            id="ebitda_change", distribution="normal", base_value=0.0,
            std_dev=0.15, correlations={"rate_change": 0.3},
        ),
        SimulationVariable(
            id="rate_change", distribution="normal", base_value=0.0,
            std_dev=0.2, correlations={"ebitda_change": 0.3},
        ),
        SimulationVariable(
            id="debt_change", distribution="uniform",
            min_value=-0.05, max_value=0.1,
        ),
    ]


@pytest.fixture
def leverage_config(ebitda_variable):
    """1,000 iterations, seed 42, single EBITDA variable."""
    return MonteCarloConfig(
        variables=[ebitda_variable],
        iterations=1000,
        random_seed=42,
    )
