"""
Portfolio Geometry Calculator
=============================

Closed-form risk/return geometry for a fixed set of assets:

- Covariance matrix from standard deviations and correlations (C = D R D)
- Minimum-Variance Line (MVL) evaluated from affine coefficients
- Portfolio risk via the quadratic form sqrt(w^T C w)
- Portfolio return via w . mu
- No-short-selling feasibility filter (efficient frontier segment)
- Random portfolio clouds, with and without short selling
- Two-asset edges of the feasible region

Every function is pure. Single weight vectors (1-D) give scalars and batches
(2-D, one portfolio per row) give one value per row, so whole curves and
clouds are evaluated without Python loops.

Theory Background:
------------------
For weights w, expected returns mu and covariance C:

    mu_p    = w^T mu
    sigma_p = sqrt(w^T C w)

Plotting sigma_p against mu_p for every portfolio on the MVL traces the
Markowitz bullet. Restricting to w >= 0 cuts the bullet down to the part
reachable without short selling.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from portfolio_geometry.core.errors import DegenerateSampleError, InvalidInputError
from portfolio_geometry.core.inputs import (
    ArrayLike,
    AssetSet,
    CorrelationMatrix,
    MVLCoefficients,
    Portfolio,
    validate_correlation,
    validate_stddevs,
)

logger = logging.getLogger(__name__)

# A quadratic form below -(ABS + REL * sum|w_i||C_ij||w_j|) means the
# covariance is not positive semi-definite; anything above is rounding noise
NEGATIVE_VARIANCE_ABS_TOLERANCE = 1e-12
NEGATIVE_VARIANCE_REL_TOLERANCE = 1e-10


def _weights_array(weights: ArrayLike, n_assets: Optional[int] = None) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    if w.ndim not in (1, 2):
        raise InvalidInputError(
            f"Weights must be a vector or a 2-D batch, got shape {w.shape}"
        )
    if n_assets is not None and w.shape[-1] != n_assets:
        raise InvalidInputError(
            f"Weights have {w.shape[-1]} components but there are {n_assets} assets"
        )
    return w


def build_covariance(
    returns: ArrayLike,
    stddevs: ArrayLike,
    correlation: ArrayLike
) -> np.ndarray:
    """
    Build the covariance matrix from standard deviations and correlations.

    Formula: C = diag(sigma) * R * diag(sigma), i.e. C_ij = sigma_i * rho_ij * sigma_j

    Args:
        returns: Expected returns (only used to check the asset count)
        stddevs: Standard deviations, all > 0
        correlation: Correlation matrix (N x N)

    Returns:
        Covariance matrix (N x N), symmetric and positive semi-definite

    Raises:
        InvalidInputError: If dimensions disagree or the correlation matrix is
            asymmetric, has a non-unit diagonal, or is not PSD
    """
    n_assets = len(np.atleast_1d(np.asarray(returns, dtype=float)))
    sigma = validate_stddevs(stddevs)
    if len(sigma) != n_assets:
        raise InvalidInputError(
            f"Got {n_assets} expected returns but {len(sigma)} standard deviations"
        )
    rho = validate_correlation(correlation, n_assets)

    d = np.diag(sigma)
    cov = d @ rho @ d

    # Remove rounding asymmetry so C[i, j] == C[j, i] exactly
    return (cov + cov.T) / 2


def covariance_for(
    assets: AssetSet,
    correlation: Union[CorrelationMatrix, ArrayLike]
) -> np.ndarray:
    """``build_covariance`` for an ``AssetSet``."""
    if isinstance(correlation, CorrelationMatrix):
        correlation = correlation.values
    return build_covariance(assets.returns, assets.stddevs, correlation)


def evaluate_mvl(
    coefficients: MVLCoefficients,
    target_returns: Union[float, ArrayLike]
) -> np.ndarray:
    """
    Evaluate the Minimum-Variance Line at the given target returns.

    Formula: w_i(mu) = a_i * mu + b_i

    Precomputed coefficients are only meaningful for the asset set they were
    fitted to. Use ``MinimumVarianceSolver.mvl_coefficients`` for an arbitrary
    asset set.

    Args:
        coefficients: MVL coefficients (a, b)
        target_returns: One target return or a sequence of them

    Returns:
        Weight vector for a scalar target, else one row per target (T x N)
    """
    return coefficients.weights(target_returns)


def portfolio_variance(weights: ArrayLike, covariance: ArrayLike) -> Union[float, np.ndarray]:
    """
    Calculate portfolio variance using the quadratic form.

    Formula: sigma_p^2 = w^T * C * w

    For a batch this is evaluated row-wise as sum((W @ C) * W, axis=1).
    """
    cov = np.asarray(covariance, dtype=float)
    w = _weights_array(weights, cov.shape[0])

    if w.ndim == 1:
        return float(w @ cov @ w)
    return np.sum((w @ cov) * w, axis=1)


def portfolio_risk(weights: ArrayLike, covariance: ArrayLike) -> Union[float, np.ndarray]:
    """
    Calculate portfolio standard deviation.

    Formula: sigma_p = sqrt(w^T * C * w)

    Args:
        weights: Weight vector, or batch with one portfolio per row
        covariance: Covariance matrix (N x N)

    Returns:
        Risk as a float, or an array with one value per row

    Raises:
        InvalidInputError: If the quadratic form is negative beyond rounding
            noise relative to the size of its terms, which means the
            covariance is not positive semi-definite
    """
    cov = np.asarray(covariance, dtype=float)
    w = _weights_array(weights, cov.shape[0])
    variance = np.asarray(portfolio_variance(w, cov))

    abs_w = np.abs(w)
    scale = np.sum((abs_w @ np.abs(cov)) * abs_w, axis=-1)
    tolerance = NEGATIVE_VARIANCE_ABS_TOLERANCE + NEGATIVE_VARIANCE_REL_TOLERANCE * scale

    if np.any(variance < -tolerance):
        raise InvalidInputError(
            f"Negative portfolio variance {variance.min():.3e}: "
            "covariance matrix is not positive semi-definite"
        )

    risk = np.sqrt(np.clip(variance, 0.0, None))
    if risk.ndim == 0:
        return float(risk)
    return risk


def portfolio_return(weights: ArrayLike, returns: ArrayLike) -> Union[float, np.ndarray]:
    """
    Calculate expected portfolio return.

    Formula: mu_p = w^T * mu = sum(w_i * mu_i)
    """
    mu = np.asarray(returns, dtype=float)
    w = _weights_array(weights, len(mu))

    result = w @ mu
    if np.ndim(result) == 0:
        return float(result)
    return result


def risk_return(
    weights: ArrayLike,
    assets: AssetSet,
    covariance: ArrayLike
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Risk-return coordinates of a batch of portfolios.

    Returns:
        Tuple of (risks, returns), the (sigma, mu) points of the batch
    """
    w = np.atleast_2d(_weights_array(weights, assets.n_assets))
    return portfolio_risk(w, covariance), portfolio_return(w, assets.returns)


def is_feasible(weights: ArrayLike) -> Union[bool, np.ndarray]:
    """
    Check the no-short-selling constraint.

    A portfolio is feasible iff every weight is >= 0. For a batch the check
    is applied row-wise and a boolean mask is returned.
    """
    w = _weights_array(weights)
    feasible = np.all(w >= 0, axis=-1)
    if np.ndim(feasible) == 0:
        return bool(feasible)
    return feasible


def efficient_segment(
    mvl_weights: ArrayLike,
    target_returns: ArrayLike
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Filter an MVL curve down to its feasible part (the long-only frontier).

    Args:
        mvl_weights: MVL weights, one row per target return
        target_returns: Target returns matching the rows of ``mvl_weights``

    Returns:
        Tuple of (feasible_weights, feasible_targets)
    """
    w = np.atleast_2d(_weights_array(mvl_weights))
    targets = np.asarray(target_returns, dtype=float).ravel()
    if len(targets) != len(w):
        raise InvalidInputError(
            f"Got {len(w)} MVL weight rows but {len(targets)} target returns"
        )

    mask = is_feasible(w)
    logger.debug("Efficient segment keeps %d of %d MVL points", int(mask.sum()), len(w))
    return w[mask], targets[mask]


def random_portfolios(
    n: int,
    n_assets: int,
    allow_short: bool,
    rng: Optional[np.random.Generator] = None,
    min_abs_sum: float = 1e-8,
    max_resamples: int = 100
) -> np.ndarray:
    """
    Generate random fully-invested portfolios.

    Each row samples one value per asset and is then divided by its own sum,
    so every row sums to 1:
    - allow_short=True: standard normal samples (weights may be negative)
    - allow_short=False: uniform [0, 1) samples (weights are non-negative)

    With short selling the raw sum of a row can be arbitrarily close to zero
    and the normalization blows up. Rows whose sum is smaller in magnitude
    than ``min_abs_sum`` are resampled, at most ``max_resamples`` times.

    Args:
        n: Number of portfolios
        n_assets: Number of assets (N)
        allow_short: If True, allow negative weights
        rng: Random generator (default: a fresh, unseeded generator)
        min_abs_sum: Smallest acceptable magnitude of a row sum
        max_resamples: Resampling rounds before giving up

    Returns:
        Array of shape (n, n_assets)

    Raises:
        InvalidInputError: If n < 0 or n_assets < 2
        DegenerateSampleError: If degenerate rows remain after resampling
    """
    if n < 0:
        raise InvalidInputError(f"Number of portfolios must be >= 0, got {n}")
    if n_assets < 2:
        raise InvalidInputError(f"At least two assets are required, got {n_assets}")

    if rng is None:
        rng = np.random.default_rng()

    def draw(size: int) -> np.ndarray:
        if allow_short:
            return rng.standard_normal((size, n_assets))
        return rng.random((size, n_assets))

    samples = draw(n)
    sums = samples.sum(axis=1)
    degenerate = np.abs(sums) < min_abs_sum

    rounds = 0
    while np.any(degenerate):
        if rounds >= max_resamples:
            raise DegenerateSampleError(
                f"{int(degenerate.sum())} random portfolios still have a near-zero "
                f"weight sum after {max_resamples} resampling rounds"
            )
        rounds += 1
        logger.debug("Resampling %d degenerate portfolios (round %d)", int(degenerate.sum()), rounds)
        samples[degenerate] = draw(int(degenerate.sum()))
        sums = samples.sum(axis=1)
        degenerate = np.abs(sums) < min_abs_sum

    return samples / sums[:, np.newaxis]


def two_asset_edge(
    asset_i: int,
    asset_j: int,
    n_assets: int,
    weight_range: ArrayLike
) -> np.ndarray:
    """
    Portfolios invested only in assets I and J.

    The weight on J sweeps ``weight_range`` and the weight on I is 1 - w_J;
    every other asset gets 0. Sweeping [0, 1] gives the long-only edge of the
    feasible region, a wider range such as [-0.5, 1.5] extends it into short
    positions.

    Args:
        asset_i: Index of the first asset (0-based)
        asset_j: Index of the second asset (0-based)
        n_assets: Total number of assets (N)
        weight_range: Weights on asset J, e.g. np.linspace(0, 1, 200)

    Returns:
        Array of shape (len(weight_range), n_assets)
    """
    if asset_i == asset_j:
        raise InvalidInputError("Two-asset edge needs two distinct assets")
    for index in (asset_i, asset_j):
        if not 0 <= index < n_assets:
            raise InvalidInputError(f"Asset index {index} out of range for {n_assets} assets")

    w_j = np.asarray(weight_range, dtype=float).ravel()
    weights = np.zeros((len(w_j), n_assets))
    weights[:, asset_i] = 1 - w_j
    weights[:, asset_j] = w_j
    return weights


def make_portfolio(
    weights: ArrayLike,
    assets: AssetSet,
    covariance: ArrayLike
) -> Portfolio:
    """Derive return (w . mu) and risk (sqrt(w^T C w)) for a single weight vector."""
    w = _weights_array(weights, assets.n_assets)
    if w.ndim != 1:
        raise InvalidInputError(f"Expected a single weight vector, got shape {w.shape}")
    return Portfolio(
        weights=w,
        expected_return=portfolio_return(w, assets.returns),
        risk=portfolio_risk(w, covariance),
    )
