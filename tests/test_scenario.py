"""Tests for scenario.py - deterministic scenario impact."""

import pytest

from covenant_risk import (
    CovenantThreshold,
    InvalidConfigurationError,
    ScenarioImpactParams,
    SimulationContext,
    calculate_scenario_impact,
)
from covenant_risk.lib.scenario import apply_scenario


class TestApplyScenario:
    """Tests for shifting the base metrics."""

    def test_zero_shift_is_identity(self, base_metrics):
        assert apply_scenario(ScenarioImpactParams(), base_metrics) == base_metrics

    def test_shifts(self, base_metrics):
        params = ScenarioImpactParams(ebitda_change=-10, rate_change_bps=200,
                                      debt_change=5, revenue_change=-20)
        metrics = apply_scenario(params, base_metrics)
        assert metrics.total_debt == pytest.approx(210.0)
        assert metrics.ebitda == pytest.approx(45.0)
        assert metrics.interest_expense == pytest.approx(10.2)
        assert metrics.fixed_charges == pytest.approx(20.4)
        assert metrics.net_operating_income == pytest.approx(36.0)
        assert metrics.total_debt_service == base_metrics.total_debt_service
        # 30% of the revenue change flows through to liquidity
        assert metrics.liquidity == pytest.approx(30.0 * 0.94)


class TestCalculateScenarioImpact:
    """Tests for covenant impact of a point scenario."""

    def test_zero_shift_reproduces_baseline(self, full_context):
        impact = calculate_scenario_impact(ScenarioImpactParams(), full_context)
        assert impact["leverage_ratio"]["ratio"].value == 4.0
        assert impact["leverage_ratio"]["headroom"] == pytest.approx(100 * 0.5 / 4.5)
        assert impact["interest_coverage"]["ratio"].value == 5.0
        assert impact["interest_coverage"]["headroom"] == pytest.approx(100 * 2.0 / 3.0)
        assert impact["minimum_liquidity"]["ratio"].value == 30.0
        assert impact["minimum_liquidity"]["headroom"] == pytest.approx(50.0)

    def test_only_present_covenants(self, leverage_context):
        impact = calculate_scenario_impact(ScenarioImpactParams(ebitda_change=-20),
                                           leverage_context)
        assert list(impact) == ["leverage_ratio"]
        assert impact["leverage_ratio"]["ratio"].value == pytest.approx(5.0)
        assert impact["leverage_ratio"]["headroom"] < 0

    def test_threshold_direction_honored(self, base_metrics):
        """Test that a maximum-type coverage covenant uses the maximum formula."""
        context = SimulationContext(
            base_metrics=base_metrics,
            covenant_thresholds={"interest_coverage": CovenantThreshold(6.0, "maximum")},
        )
        impact = calculate_scenario_impact(ScenarioImpactParams(), context)
        assert impact["interest_coverage"]["headroom"] == pytest.approx(100 / 6.0)

    def test_ebitda_wipeout_unbounded(self, leverage_context):
        impact = calculate_scenario_impact(ScenarioImpactParams(ebitda_change=-100),
                                           leverage_context)
        assert impact["leverage_ratio"]["ratio"].is_unbounded
        assert impact["leverage_ratio"]["headroom"] == float("-inf")


class TestScenarioParams:
    """Tests for scenario parameter loading."""

    def test_from_dict(self):
        params = ScenarioImpactParams.from_dict({"ebitda_change": -15, "rate_change_bps": 100})
        assert params.ebitda_change == -15.0
        assert params.rate_change_bps == 100.0
        assert params.debt_change == 0.0

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidConfigurationError, match="Unknown scenario parameters"):
            ScenarioImpactParams.from_dict({"fx_change": 5})
