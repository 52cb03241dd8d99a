"""
Unit Tests for the Portfolio Geometry Calculator
================================================

Covariance construction, MVL evaluation, risk/return, feasibility,
random portfolios and two-asset edges.
"""

import numpy as np
import pytest

from portfolio_geometry.core.errors import DegenerateSampleError, InvalidInputError
from portfolio_geometry.core.inputs import CorrelationMatrix
from portfolio_geometry.core.geometry import (
    build_covariance,
    covariance_for,
    efficient_segment,
    evaluate_mvl,
    is_feasible,
    make_portfolio,
    portfolio_return,
    portfolio_risk,
    portfolio_variance,
    random_portfolios,
    risk_return,
    two_asset_edge,
)


class TestBuildCovariance:
    def test_symmetric(self, cov):
        assert np.array_equal(cov, cov.T)

    def test_diagonal_is_variance(self, cov):
        np.testing.assert_allclose(np.diag(cov), [0.28 ** 2, 0.24 ** 2, 0.25 ** 2])

    def test_off_diagonal(self, cov):
        assert cov[0, 1] == pytest.approx(-0.10 * 0.28 * 0.24)
        assert cov[0, 2] == pytest.approx(0.25 * 0.28 * 0.25)
        assert cov[1, 2] == pytest.approx(0.20 * 0.24 * 0.25)

    def test_positive_semi_definite(self, cov):
        assert np.linalg.eigvalsh(cov).min() > 0

    def test_symmetric_for_random_inputs(self, rng):
        for _ in range(10):
            n = rng.integers(2, 8)
            x = rng.standard_normal((n, 3 * n))
            corr = np.corrcoef(x)
            sigma = rng.uniform(0.05, 0.5, n)
            c = build_covariance(np.zeros(n), sigma, corr)
            assert np.array_equal(c, c.T)

    def test_dimension_mismatch(self, example):
        with pytest.raises(InvalidInputError):
            build_covariance([0.1, 0.2], example.stddevs, example.correlation_rows)

    def test_correlation_dimension_mismatch(self):
        with pytest.raises(InvalidInputError):
            build_covariance([0.1, 0.2], [0.2, 0.3], np.eye(3))

    def test_negative_stddev(self, example):
        with pytest.raises(InvalidInputError):
            build_covariance(example.returns, [0.28, -0.24, 0.25], example.correlation_rows)

    def test_asymmetric_correlation(self):
        with pytest.raises(InvalidInputError):
            build_covariance([0.1, 0.2], [0.2, 0.3], [[1.0, 0.5], [0.4, 1.0]])

    def test_covariance_for_accepts_matrix_or_array(self, assets, example):
        from_matrix = covariance_for(assets, CorrelationMatrix(example.correlation_rows))
        from_array = covariance_for(assets, example.correlation_rows)
        np.testing.assert_array_equal(from_matrix, from_array)

    def test_covariance_for_validates_raw_array(self, assets):
        with pytest.raises(InvalidInputError):
            covariance_for(assets, np.eye(2))


class TestEvaluateMVL:
    def test_scalar_target(self, coefficients):
        w = evaluate_mvl(coefficients, 0.10)
        expected = np.array([-8.614, -2.769, 11.384]) * 0.10 + np.array([1.578, 0.845, -1.422])
        np.testing.assert_allclose(w, expected)

    def test_matches_componentwise_formula(self, coefficients, example):
        targets = example.target_returns()
        w = evaluate_mvl(coefficients, targets)
        assert w.shape == (len(targets), 3)
        for k, mu in enumerate(targets[::17]):
            np.testing.assert_allclose(w[k * 17], coefficients.a * mu + coefficients.b)

    def test_risk_at_ten_percent(self, coefficients, cov):
        w = evaluate_mvl(coefficients, 0.10)
        risk = portfolio_risk(w, cov)
        assert isinstance(risk, float)
        assert 0 < risk < 1.0


class TestRiskAndReturn:
    def test_single_asset_risk(self, cov):
        assert portfolio_risk([0.0, 1.0, 0.0], cov) == pytest.approx(0.24)

    def test_batch_matches_single(self, cov, rng):
        w = random_portfolios(50, 3, allow_short=True, rng=rng)
        batch = portfolio_risk(w, cov)
        singles = np.array([portfolio_risk(row, cov) for row in w])
        np.testing.assert_allclose(batch, singles)

    def test_risk_non_negative(self, cov, rng):
        for allow_short in (True, False):
            w = random_portfolios(2000, 3, allow_short, rng=rng)
            assert np.all(portfolio_risk(w, cov) >= 0)

    def test_risk_of_zero_weights(self, cov):
        assert portfolio_risk(np.zeros(3), cov) == 0.0

    def test_non_psd_covariance(self):
        bad = np.array([[1.0, 2.0], [2.0, 1.0]])
        assert portfolio_variance([1.0, -1.0], bad) == pytest.approx(-2.0)
        with pytest.raises(InvalidInputError):
            portfolio_risk([1.0, -1.0], bad)

    def test_perfectly_correlated_large_scale_pair(self):
        cov = build_covariance([0.0, 0.0], [28.0, 24.0], [[1.0, 1.0], [1.0, 1.0]])
        w = np.outer(np.linspace(-50, 50, 401), [0.24, -0.28])
        risk = portfolio_risk(w, cov)
        assert np.all(risk >= 0)
        assert np.all(risk < 1e-3)

    def test_zero_variance_hedge_with_large_stddevs(self):
        cov = build_covariance([0.0, 0.0], [300.0, 700.0], [[1.0, 1.0], [1.0, 1.0]])
        assert portfolio_risk([7 / 4, -3 / 4], cov) < 1e-3

    def test_tolerance_scales_with_non_psd_magnitude(self):
        bad = np.array([[1.0, 2.0], [2.0, 1.0]]) * 1e6
        with pytest.raises(InvalidInputError):
            portfolio_risk([1.0, -1.0], bad)

    def test_weight_dimension_mismatch(self, cov):
        with pytest.raises(InvalidInputError):
            portfolio_risk([0.5, 0.5], cov)

    def test_portfolio_return(self, assets):
        assert portfolio_return([0.3, 0.3, 0.4], assets.returns) == pytest.approx(0.155)

    def test_portfolio_return_batch(self, assets):
        w = np.eye(3)
        np.testing.assert_allclose(portfolio_return(w, assets.returns), assets.returns)

    def test_risk_return_pairs(self, assets, cov):
        risks, returns = risk_return(np.eye(3), assets, cov)
        np.testing.assert_allclose(risks, assets.stddevs)
        np.testing.assert_allclose(returns, assets.returns)


class TestMakePortfolio:
    def test_single_asset(self, assets, cov):
        pf = make_portfolio([1.0, 0.0, 0.0], assets, cov)
        assert pf.expected_return == pytest.approx(0.10)
        assert pf.risk == pytest.approx(0.28)
        assert pf.as_dict()['variance'] == pytest.approx(0.0784)

    def test_weights_copied_read_only(self, assets, cov):
        w = np.array([0.2, 0.3, 0.5])
        pf = make_portfolio(w, assets, cov)
        w[0] = 9.0
        assert pf.weights[0] == 0.2
        with pytest.raises(ValueError):
            pf.weights[0] = 1.0

    def test_batch_rejected(self, assets, cov):
        with pytest.raises(InvalidInputError):
            make_portfolio(np.eye(3), assets, cov)


class TestFeasibility:
    def test_long_only_weights(self):
        assert is_feasible([0.3, 0.3, 0.4]) is True

    def test_short_position(self):
        assert is_feasible([-0.1, 0.5, 0.6]) is False

    def test_zero_weight_is_feasible(self):
        assert is_feasible([0.0, 0.0, 1.0]) is True

    def test_batch_mask(self):
        mask = is_feasible([[0.3, 0.3, 0.4], [-0.1, 0.5, 0.6]])
        assert mask.tolist() == [True, False]

    def test_efficient_segment_range(self, coefficients, example):
        targets = example.target_returns()
        w, feasible_targets = efficient_segment(evaluate_mvl(coefficients, targets), targets)
        assert len(feasible_targets) > 0
        assert np.all(w >= 0)
        # w3 >= 0 needs mu >= 1.422 / 11.384, w1 >= 0 needs mu <= 1.578 / 8.614
        assert feasible_targets.min() >= 1.422 / 11.384
        assert feasible_targets.max() <= 1.578 / 8.614

    def test_efficient_segment_length_mismatch(self, coefficients):
        w = evaluate_mvl(coefficients, [0.1, 0.2])
        with pytest.raises(InvalidInputError):
            efficient_segment(w, [0.1])


class TestRandomPortfolios:
    @pytest.mark.parametrize("allow_short", [True, False])
    def test_rows_sum_to_one(self, allow_short, rng):
        w = random_portfolios(5000, 3, allow_short, rng=rng)
        assert w.shape == (5000, 3)
        np.testing.assert_allclose(w.sum(axis=1), 1.0, atol=1e-8)

    def test_long_only_non_negative(self, rng):
        w = random_portfolios(5000, 4, allow_short=False, rng=rng)
        assert np.all(w >= 0)

    def test_short_has_negative_weights(self, rng):
        w = random_portfolios(5000, 3, allow_short=True, rng=rng)
        assert np.any(w < 0)

    def test_reproducible_with_seed(self):
        a = random_portfolios(10, 3, True, rng=np.random.default_rng(7))
        b = random_portfolios(10, 3, True, rng=np.random.default_rng(7))
        np.testing.assert_array_equal(a, b)

    def test_resampling_removes_small_sums(self, rng):
        w = random_portfolios(1000, 3, allow_short=False, rng=rng, min_abs_sum=0.5)
        np.testing.assert_allclose(w.sum(axis=1), 1.0)
        # Raw rows summed to at least 0.5, so no weight can exceed 2
        assert w.max() <= 2.0

    def test_degenerate_sample_error(self, rng):
        with pytest.raises(DegenerateSampleError):
            random_portfolios(10, 3, allow_short=True, rng=rng, min_abs_sum=1e6, max_resamples=2)

    def test_invalid_sizes(self, rng):
        with pytest.raises(InvalidInputError):
            random_portfolios(-1, 3, True, rng=rng)
        with pytest.raises(InvalidInputError):
            random_portfolios(10, 1, True, rng=rng)


class TestTwoAssetEdge:
    def test_only_named_assets(self):
        w = two_asset_edge(0, 2, 3, np.linspace(-0.5, 1.5, 200))
        assert w.shape == (200, 3)
        assert np.all(w[:, 1] == 0)
        np.testing.assert_allclose(w[:, 0] + w[:, 2], 1.0)

    def test_wider_asset_set(self):
        w = two_asset_edge(3, 1, 5, np.linspace(0, 1, 11))
        np.testing.assert_array_equal(w[:, [0, 2, 4]], 0.0)
        np.testing.assert_allclose(w[:, 3] + w[:, 1], 1.0)
        np.testing.assert_allclose(w[:, 1], np.linspace(0, 1, 11))

    def test_return_linear_and_monotonic(self, assets):
        w = two_asset_edge(1, 2, 3, np.linspace(0, 1, 50))
        returns = portfolio_return(w, assets.returns)
        assert returns[0] == pytest.approx(assets.returns[1])
        assert returns[-1] == pytest.approx(assets.returns[2])
        steps = np.diff(returns)
        assert np.all(steps > 0)
        np.testing.assert_allclose(steps, steps[0])

    def test_same_asset_rejected(self):
        with pytest.raises(InvalidInputError):
            two_asset_edge(1, 1, 3, [0.0, 1.0])

    def test_index_out_of_range(self):
        with pytest.raises(InvalidInputError):
            two_asset_edge(0, 3, 3, [0.0, 1.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
