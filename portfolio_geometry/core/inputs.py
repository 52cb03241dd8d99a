"""
Input Types for Portfolio Geometry
==================================

Immutable containers for the only true inputs of the calculator (asset data
and a correlation matrix) plus the derived value types built from them:

- AssetSet - expected returns and standard deviations of N >= 2 assets
- CorrelationMatrix - symmetric, unit-diagonal, positive semi-definite matrix
- MVLCoefficients - affine map from target return to MVL weights
- Portfolio - a weight vector with its expected return and risk

Arrays are copied on construction and flagged read-only, so a value built
once can be shared freely between computations.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import numpy as np

from portfolio_geometry.core.errors import InvalidInputError

# Tolerance used for symmetry, unit diagonal and eigenvalue checks
MATRIX_TOLERANCE = 1e-10

ArrayLike = Union[Sequence[float], np.ndarray]


def _frozen_array(values: ArrayLike, name: str, ndim: int) -> np.ndarray:
    """Copy ``values`` into a read-only float array of the given rank."""
    try:
        array = np.array(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be numeric: {exc}") from exc

    if array.ndim != ndim:
        raise InvalidInputError(
            f"{name} must be {ndim}-dimensional, got shape {array.shape}"
        )
    if not np.all(np.isfinite(array)):
        raise InvalidInputError(f"{name} contains NaN or infinite values")

    array.setflags(write=False)
    return array


def validate_stddevs(stddevs: ArrayLike) -> np.ndarray:
    """
    Check that every standard deviation is strictly positive.

    Returns:
        The standard deviations as a read-only array

    Raises:
        InvalidInputError: If any value is zero or negative
    """
    sigma = _frozen_array(stddevs, "stddevs", 1)
    if np.any(sigma <= 0):
        raise InvalidInputError(
            f"Standard deviations must be > 0, got {sigma.tolist()}"
        )
    return sigma


def validate_correlation(values: ArrayLike, n_assets: Optional[int] = None) -> np.ndarray:
    """
    Validate a correlation matrix.

    The matrix must be square (N x N, matching ``n_assets`` when given),
    symmetric, have a unit diagonal, entries in [-1, 1], and be positive
    semi-definite.

    Args:
        values: Candidate correlation matrix
        n_assets: Expected dimension, or None to accept any N >= 2

    Returns:
        The matrix as a read-only array

    Raises:
        InvalidInputError: On any violated property
    """
    rho = _frozen_array(values, "correlation", 2)

    rows, cols = rho.shape
    if rows != cols:
        raise InvalidInputError(f"Correlation matrix must be square, got shape {rho.shape}")
    if n_assets is not None and rows != n_assets:
        raise InvalidInputError(
            f"Correlation matrix shape {rho.shape} doesn't match "
            f"number of assets {n_assets}"
        )
    if rows < 2:
        raise InvalidInputError("At least two assets are required")

    if not np.allclose(rho, rho.T, rtol=0.0, atol=MATRIX_TOLERANCE):
        raise InvalidInputError("Correlation matrix is not symmetric")

    if not np.allclose(np.diag(rho), 1.0, rtol=0.0, atol=MATRIX_TOLERANCE):
        raise InvalidInputError(
            f"Correlation matrix diagonal must be 1, got {np.diag(rho).tolist()}"
        )

    if np.any(np.abs(rho) > 1.0 + MATRIX_TOLERANCE):
        raise InvalidInputError("Correlation entries must lie in [-1, 1]")

    # A correlation matrix is only valid if it is positive semi-definite
    eigenvalues = np.linalg.eigvalsh(rho)
    if np.any(eigenvalues < -MATRIX_TOLERANCE):
        raise InvalidInputError(
            f"Correlation matrix is not positive semi-definite "
            f"(smallest eigenvalue {eigenvalues.min():.3e})"
        )

    return rho


@dataclass(frozen=True, eq=False)
class AssetSet:
    """
    Ordered set of assets with expected returns and standard deviations.

    Attributes:
        returns (np.ndarray): Expected return of each asset
        stddevs (np.ndarray): Standard deviation of each asset (all > 0)
        names (List[str]): Asset labels (default: S_1, S_2, ...)

    Example:
        >>> assets = AssetSet([0.10, 0.15, 0.20], [0.28, 0.24, 0.25])
        >>> assets.n_assets
        3
    """

    returns: np.ndarray
    stddevs: np.ndarray
    names: List[str] = field(default=None)

    def __post_init__(self):
        returns = _frozen_array(self.returns, "returns", 1)
        stddevs = validate_stddevs(self.stddevs)

        if len(returns) < 2:
            raise InvalidInputError(f"At least two assets are required, got {len(returns)}")
        if len(returns) != len(stddevs):
            raise InvalidInputError(
                f"Got {len(returns)} expected returns but {len(stddevs)} standard deviations"
            )

        if self.names is None:
            names = [f"S_{i+1}" for i in range(len(returns))]
        else:
            names = list(self.names)
            if len(names) != len(returns):
                raise InvalidInputError(
                    f"Got {len(names)} asset names for {len(returns)} assets"
                )

        object.__setattr__(self, "returns", returns)
        object.__setattr__(self, "stddevs", stddevs)
        object.__setattr__(self, "names", names)

    @property
    def n_assets(self) -> int:
        return len(self.returns)


@dataclass(frozen=True, eq=False)
class CorrelationMatrix:
    """Validated correlation matrix. See ``validate_correlation``."""

    values: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "values", validate_correlation(self.values))

    @property
    def n_assets(self) -> int:
        return self.values.shape[0]


@dataclass(frozen=True, eq=False)
class MVLCoefficients:
    """
    Affine parameterization of the minimum-variance line.

    For a target return mu the MVL weights are ``w_i = a_i * mu + b_i``.
    The coefficients either come precomputed (the textbook example) or from
    ``MinimumVarianceSolver.mvl_coefficients``.
    """

    a: np.ndarray
    b: np.ndarray

    def __post_init__(self):
        a = _frozen_array(self.a, "a", 1)
        b = _frozen_array(self.b, "b", 1)
        if a.shape != b.shape:
            raise InvalidInputError(
                f"MVL coefficient lengths differ: a has {len(a)}, b has {len(b)}"
            )
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)

    @property
    def n_assets(self) -> int:
        return len(self.a)

    def weights(self, target_returns: Union[float, ArrayLike]) -> np.ndarray:
        """Weights on the line, one row per target return."""
        targets = np.asarray(target_returns, dtype=float)
        if targets.ndim == 0:
            return self.a * targets + self.b
        return np.outer(targets.ravel(), self.a) + self.b


@dataclass(frozen=True, eq=False)
class Portfolio:
    """A weight vector with its derived expected return and risk."""

    weights: np.ndarray
    expected_return: float
    risk: float

    def __post_init__(self):
        object.__setattr__(self, "weights", _frozen_array(self.weights, "weights", 1))
        object.__setattr__(self, "expected_return", float(self.expected_return))
        object.__setattr__(self, "risk", float(self.risk))

    def as_dict(self) -> dict:
        return {
            'mean': self.expected_return,
            'std': self.risk,
            'variance': self.risk ** 2,
        }
