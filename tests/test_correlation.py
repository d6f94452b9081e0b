"""Tests for correlation.py and sampler.py - correlation and correlated sampling."""

import logging

import pytest
import numpy as np
from scipy import linalg, stats

from covenant_risk import (
    CorrelatedSampler,
    InconsistentCorrelationMatrixError,
    SeededRandom,
    SimulationVariable,
    build_correlation_matrix,
    cholesky_decomposition,
    normal_cdf,
    validate_correlation_matrix,
)

VALID_MATRIX = np.array([
    [1.0, 0.3, 0.2],
    [0.3, 1.0, 0.5],
    [0.2, 0.5, 1.0],
])

NON_PSD_MATRIX = np.array([
    [1.0, 0.9, -0.9],
    [0.9, 1.0, 0.9],
    [-0.9, 0.9, 1.0],
])


class TestBuildCorrelationMatrix:
    """Tests for building the matrix from variable declarations."""

    def test_symmetric_unit_diagonal(self, correlated_variables):
        """Test symmetry and unit diagonal."""
        corr = build_correlation_matrix(correlated_variables)
        assert corr.shape == (3, 3)
        assert np.allclose(np.diag(corr), 1.0)
        assert np.array_equal(corr, corr.T)

    def test_declared_and_default_entries(self, correlated_variables):
        """Test declared pairs and zero default for unspecified pairs."""
        corr = build_correlation_matrix(correlated_variables)
        assert corr[0, 1] == 0.3
        assert corr[0, 2] == 0.0
        assert corr[1, 2] == 0.0

    def test_one_sided_declaration_is_mirrored(self):
        """Test that a pair declared on one variable fills both entries."""
        variables = [
            SimulationVariable(id="a", distribution="normal", correlations={"b": -0.4}),
            SimulationVariable(id="b", distribution="normal"),
        ]
        corr = build_correlation_matrix(variables)
        assert corr[0, 1] == -0.4
        assert corr[1, 0] == -0.4

    def test_later_declaration_wins(self):
        """Test that conflicting declarations resolve to the later variable."""
        variables = [
            SimulationVariable(id="a", distribution="normal", correlations={"b": 0.3}),
            SimulationVariable(id="b", distribution="normal", correlations={"a": 0.5}),
        ]
        corr = build_correlation_matrix(variables)
        assert corr[0, 1] == 0.5
        assert corr[1, 0] == 0.5

    def test_unknown_ids_ignored(self):
        """Test that correlations to variables outside the set are ignored."""
        variables = [
            SimulationVariable(id="a", distribution="normal", correlations={"zzz": 0.9}),
        ]
        corr = build_correlation_matrix(variables)
        assert np.array_equal(corr, np.eye(1))


class TestCholesky:
    """Tests for the Cholesky decomposer."""

    def test_reconstructs_matrix(self):
        """Test that L @ L.T reproduces a valid matrix."""
        L = cholesky_decomposition(VALID_MATRIX)
        assert np.allclose(L @ L.T, VALID_MATRIX, atol=1e-9)

    def test_lower_triangular(self):
        """Test that the factor is lower triangular."""
        L = cholesky_decomposition(VALID_MATRIX)
        assert np.allclose(np.triu(L, k=1), 0.0)

    def test_matches_scipy(self):
        """Test agreement with scipy's Cholesky factor."""
        L = cholesky_decomposition(VALID_MATRIX)
        expected = linalg.cholesky(VALID_MATRIX, lower=True)
        assert np.allclose(L, expected, atol=1e-12)

    def test_identity(self):
        """Test that the identity factors to itself."""
        assert np.array_equal(cholesky_decomposition(np.eye(4)), np.eye(4))

    def test_non_psd_clamped_in_lenient_mode(self, caplog):
        """Test that a non-PSD matrix is clamped, not rejected, by default."""
        with caplog.at_level(logging.WARNING):
            L = cholesky_decomposition(NON_PSD_MATRIX)
        assert np.all(np.isfinite(L))
        assert L[2, 2] == 0.0
        assert "not positive semi-definite" in caplog.text

    def test_non_psd_rejected_in_strict_mode(self):
        """Test that strict mode raises for a non-PSD matrix."""
        with pytest.raises(InconsistentCorrelationMatrixError, match="positive semi-definite"):
            cholesky_decomposition(NON_PSD_MATRIX, strict=True)

    def test_zero_pivot_guarded(self):
        """Test that a singular matrix does not divide by zero."""
        L = cholesky_decomposition(np.ones((3, 3)))
        assert np.all(np.isfinite(L))
        assert np.allclose(L @ L.T, np.ones((3, 3)))

    def test_strict_accepts_valid(self):
        """Test that strict mode returns the same factor for a valid matrix."""
        assert np.array_equal(
            cholesky_decomposition(VALID_MATRIX, strict=True),
            cholesky_decomposition(VALID_MATRIX),
        )


class TestValidateCorrelationMatrix:
    """Tests for strict matrix validation."""

    def test_asymmetric(self):
        matrix = VALID_MATRIX.copy()
        matrix[0, 1] = 0.9
        with pytest.raises(InconsistentCorrelationMatrixError, match="symmetric"):
            validate_correlation_matrix(matrix)

    def test_diagonal(self):
        with pytest.raises(InconsistentCorrelationMatrixError, match="Diagonal"):
            validate_correlation_matrix(np.eye(2) * 2)

    def test_not_square(self):
        with pytest.raises(InconsistentCorrelationMatrixError, match="square"):
            validate_correlation_matrix(np.ones((2, 3)))

    def test_out_of_range(self):
        matrix = np.array([[1.0, 1.5], [1.5, 1.0]])
        with pytest.raises(InconsistentCorrelationMatrixError, match="between -1 and 1"):
            validate_correlation_matrix(matrix)


class TestNormalCdf:
    """Tests for the standard normal CDF approximation."""

    def test_close_to_scipy(self):
        """Test accuracy against scipy across the range."""
        xs = np.linspace(-6, 6, 241)
        approx = np.array([normal_cdf(x) for x in xs])
        assert np.max(np.abs(approx - stats.norm.cdf(xs))) < 2e-7

    def test_center(self):
        assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-8)

    def test_symmetry(self):
        for x in (0.3, 1.0, 2.5):
            assert normal_cdf(x) + normal_cdf(-x) == pytest.approx(1.0, abs=1e-12)


class TestCorrelatedSampler:
    """Tests for per-iteration correlated sampling."""

    def test_sample_keys(self, correlated_variables):
        """Test that every variable gets a value."""
        sampler = CorrelatedSampler(correlated_variables)
        values = sampler.sample(SeededRandom(1))
        assert set(values) == {"ebitda_change", "rate_change", "debt_change"}

    def test_sample_reproducible(self, correlated_variables):
        """Test that the same seed yields identical samples."""
        sampler = CorrelatedSampler(correlated_variables)
        rng1, rng2 = SeededRandom(42), SeededRandom(42)
        assert [sampler.sample(rng1) for _ in range(50)] == [sampler.sample(rng2) for _ in range(50)]

    def test_normal_uses_correlated_value_directly(self):
        """Test the normal transform on a single uncorrelated variable."""
        variable = SimulationVariable(id="x", distribution="normal", base_value=1.0, std_dev=0.5)
        sampler = CorrelatedSampler([variable])
        twin = SeededRandom(8)
        z = twin.normal(0.0, 1.0)
        assert sampler.sample(SeededRandom(8))["x"] == 1.0 + 0.5 * z

    def test_uniform_uses_cdf_transform(self):
        """Test the uniform transform through the normal CDF."""
        variable = SimulationVariable(id="x", distribution="uniform",
                                      min_value=-1.0, max_value=3.0)
        sampler = CorrelatedSampler([variable])
        twin = SeededRandom(8)
        u = normal_cdf(twin.normal(0.0, 1.0))
        assert sampler.sample(SeededRandom(8))["x"] == -1.0 + u * 4.0

    def test_empirical_correlation(self):
        """Test that sampled normals carry the declared correlation."""
        variables = [
            SimulationVariable(id="a", distribution="normal", std_dev=1.0,
                               correlations={"b": 0.7}),
            SimulationVariable(id="b", distribution="normal", std_dev=1.0),
        ]
        sampler = CorrelatedSampler(variables)
        draws = sampler.sample_matrix(SeededRandom(42), 5000)
        assert np.corrcoef(draws.T)[0, 1] == pytest.approx(0.7, abs=0.05)

    def test_zero_std_normal_is_constant(self):
        """Test that a zero-variance normal variable always returns its base."""
        variable = SimulationVariable(id="x", distribution="normal", base_value=0.02, std_dev=0.0)
        sampler = CorrelatedSampler([variable])
        draws = sampler.sample_matrix(SeededRandom(3), 200)
        assert np.all(draws == 0.02)

    def test_bounded_distributions(self):
        """Test uniform, triangular and lognormal supports."""
        variables = [
            SimulationVariable(id="u", distribution="uniform", min_value=-0.1, max_value=0.2),
            SimulationVariable(id="t", distribution="triangular", min_value=-0.3,
                               max_value=0.1, mode_value=0.0, correlations={"u": 0.5}),
            SimulationVariable(id="l", distribution="lognormal", base_value=1.0, std_dev=0.3),
        ]
        sampler = CorrelatedSampler(variables)
        draws = sampler.sample_matrix(SeededRandom(11), 3000)
        assert np.all((draws[:, 0] >= -0.1) & (draws[:, 0] <= 0.2))
        assert np.all((draws[:, 1] >= -0.3) & (draws[:, 1] <= 0.1))
        assert np.all(draws[:, 2] > 0)

    def test_strict_sampler_rejects_non_psd(self):
        """Test strict construction with inconsistent declarations."""
        variables = [
            SimulationVariable(id="a", distribution="normal", correlations={"b": 0.9, "c": -0.9}),
            SimulationVariable(id="b", distribution="normal", correlations={"c": 0.9}),
            SimulationVariable(id="c", distribution="normal"),
        ]
        with pytest.raises(InconsistentCorrelationMatrixError):
            CorrelatedSampler(variables, strict=True)
        assert CorrelatedSampler(variables).num_variables == 3
