"""
Minimum-Variance Solver - Closed-Form Markowitz Bullet
======================================================

Generalizes the precomputed MVL coefficients to any number of assets.

Optimization problem (short selling allowed):
    minimize:   w^T * C * w
    subject to: w^T * mu = target
                w^T * 1  = 1

Theory Background:
------------------
The Lagrange conditions give w = C^-1 (lambda * mu + gamma * 1). With

    A = 1^T C^-1 1,   B = 1^T C^-1 mu,   K = mu^T C^-1 mu,   D = A*K - B^2

the optimal weights are affine in the target return:

    w(t) = a * t + b
    a = (A * C^-1 mu - B * C^-1 1) / D
    b = (K * C^-1 1  - B * C^-1 mu) / D

which is exactly the MVLCoefficients form. The apex of the bullet (the
global minimum variance portfolio) is C^-1 1 / A, at return B / A.

Without short selling there is no closed form; ``long_only_for_target``
falls back to SLSQP with bounds [0, 1].
"""

import logging
from typing import Optional

import numpy as np
from scipy import linalg
from scipy.optimize import minimize

from portfolio_geometry.core.errors import InvalidInputError
from portfolio_geometry.core.geometry import make_portfolio, portfolio_return, portfolio_variance
from portfolio_geometry.core.inputs import AssetSet, MVLCoefficients, Portfolio

logger = logging.getLogger(__name__)


class MinimumVarianceSolver:
    """
    Closed-form minimum-variance line for an arbitrary asset set.

    Attributes:
        assets (AssetSet): Expected returns and standard deviations
        cov_matrix (np.ndarray): Covariance matrix of asset returns
        n_assets (int): Number of assets

    Example:
        >>> solver = MinimumVarianceSolver(assets, cov)
        >>> coeffs = solver.mvl_coefficients()
        >>> gmv = solver.global_minimum_variance()
    """

    def __init__(self, assets: AssetSet, cov_matrix: np.ndarray):
        """
        Initialize the solver.

        Args:
            assets: Asset set the covariance matrix belongs to
            cov_matrix: Covariance matrix (n x n), e.g. from build_covariance

        Raises:
            InvalidInputError: If the covariance shape doesn't match the assets
        """
        self.assets = assets
        self.cov_matrix = np.array(cov_matrix, dtype=float)
        self.n_assets = assets.n_assets

        if self.cov_matrix.shape != (self.n_assets, self.n_assets):
            raise InvalidInputError(
                f"Covariance matrix shape {self.cov_matrix.shape} doesn't match "
                f"number of assets {self.n_assets}"
            )

    def _solve(self) -> tuple:
        """Return C^-1 1, C^-1 mu and the scalars A, B, K, D."""
        ones = np.ones(self.n_assets)
        rhs = np.column_stack([ones, self.assets.returns])

        try:
            solution = linalg.solve(self.cov_matrix, rhs, assume_a='sym')
        except linalg.LinAlgError as exc:
            raise InvalidInputError(f"Covariance matrix is singular: {exc}") from exc

        inv_ones, inv_mu = solution[:, 0], solution[:, 1]
        A = ones @ inv_ones
        B = ones @ inv_mu
        K = self.assets.returns @ inv_mu
        D = A * K - B ** 2

        # D == 0 when every asset has the same expected return
        if abs(D) < 1e-14 * max(abs(A * K), 1.0):
            raise InvalidInputError(
                "Minimum-variance line is undefined: expected returns are not distinct"
            )
        return inv_ones, inv_mu, A, B, K, D

    def mvl_coefficients(self) -> MVLCoefficients:
        """
        Solve the Lagrange conditions for the MVL coefficients.

        Returns:
            MVLCoefficients (a, b) with w(t) = a * t + b
        """
        inv_ones, inv_mu, A, B, K, D = self._solve()
        a = (A * inv_mu - B * inv_ones) / D
        b = (K * inv_ones - B * inv_mu) / D
        logger.debug("MVL coefficients: a=%s b=%s", np.round(a, 4), np.round(b, 4))
        return MVLCoefficients(a, b)

    def weights_for_target(self, target_return: float) -> np.ndarray:
        """MVL weights for a single target return."""
        return self.mvl_coefficients().weights(target_return)

    def global_minimum_variance(self) -> Portfolio:
        """
        Find the global Minimum Variance Portfolio (apex of the bullet).

        Formula: w = C^-1 1 / (1^T C^-1 1)

        Returns:
            Portfolio with the lowest attainable risk
        """
        inv_ones, _, A, _, _, _ = self._solve()
        return make_portfolio(inv_ones / A, self.assets, self.cov_matrix)

    def long_only_for_target(self, target_return: float) -> Optional[Portfolio]:
        """
        Find the minimum variance long-only portfolio for a target return.

        This traces one point of the efficient frontier under the
        no-short-selling constraint.

        Args:
            target_return: Target expected return

        Returns:
            The optimal Portfolio, or None if the target is unreachable
            with non-negative weights or the solver did not converge
        """
        mu = self.assets.returns
        if not mu.min() - 1e-12 <= target_return <= mu.max() + 1e-12:
            logger.warning(
                "Target return %.4f outside long-only range [%.4f, %.4f]",
                target_return, mu.min(), mu.max()
            )
            return None

        w0 = np.ones(self.n_assets) / self.n_assets

        constraints = [
            {'type': 'eq', 'fun': lambda w: np.sum(w) - 1},
            {'type': 'eq', 'fun': lambda w: portfolio_return(w, mu) - target_return}
        ]
        bounds = [(0, 1) for _ in range(self.n_assets)]

        result = minimize(
            lambda w: portfolio_variance(w, self.cov_matrix),
            w0,
            method='SLSQP',
            bounds=bounds,
            constraints=constraints,
            options={'ftol': 1e-12}
        )

        if not result.success:
            logger.warning("Long-only optimization did not converge: %s", result.message)
            return None

        # SLSQP can step marginally outside the bounds
        weights = np.clip(result.x, 0.0, None)
        weights = weights / weights.sum()
        return make_portfolio(weights, self.assets, self.cov_matrix)
