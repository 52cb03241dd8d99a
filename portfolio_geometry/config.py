"""
Default Settings
================

Fixed inputs of the textbook examples. Nothing is read from files or the
environment: the settings are frozen dataclasses and every derived input is
built on demand from them.

BulletExample - three assets of the Markowitz bullet illustration
CompoundingExample - 10% nominal rate compounded 1 to 24 times a year
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from portfolio_geometry.core.inputs import AssetSet, CorrelationMatrix, MVLCoefficients


@dataclass(frozen=True)
class BulletExample:
    """
    Three-asset example with precomputed MVL coefficients.

    The coefficients (a, b) were fitted to exactly these returns, deviations
    and correlations; they do not carry over to other asset sets.
    """

    returns: Tuple[float, ...] = (0.10, 0.15, 0.20)
    stddevs: Tuple[float, ...] = (0.28, 0.24, 0.25)
    correlation_rows: Tuple[Tuple[float, ...], ...] = (
        (1.00, -0.10, 0.25),
        (-0.10, 1.00, 0.20),
        (0.25, 0.20, 1.00),
    )
    mvl_a: Tuple[float, ...] = (-8.614, -2.769, 11.384)
    mvl_b: Tuple[float, ...] = (1.578, 0.845, -1.422)

    # Target returns along the MVL
    target_min: float = 0.05
    target_max: float = 0.30
    n_targets: int = 100

    # Random portfolio clouds
    n_random: int = 30000

    # Two-asset edges: extended (short selling) and long-only sweeps
    short_edge_range: Tuple[float, float] = (-0.5, 1.5)
    long_edge_range: Tuple[float, float] = (0.0, 1.0)
    n_edge_points: int = 200

    def assets(self) -> AssetSet:
        return AssetSet(self.returns, self.stddevs)

    def correlation(self) -> CorrelationMatrix:
        return CorrelationMatrix(self.correlation_rows)

    def coefficients(self) -> MVLCoefficients:
        return MVLCoefficients(self.mvl_a, self.mvl_b)

    def target_returns(self) -> np.ndarray:
        return np.linspace(self.target_min, self.target_max, self.n_targets)

    def edge_weights(self, allow_short: bool) -> np.ndarray:
        """Weights on the second asset of each two-asset edge."""
        low, high = self.short_edge_range if allow_short else self.long_edge_range
        return np.linspace(low, high, self.n_edge_points)


@dataclass(frozen=True)
class CompoundingExample:
    rate: float = 0.10
    frequencies: Tuple[int, ...] = (1, 2, 4, 12, 24)
    horizon: float = 5.0
    smooth_step: float = 0.001


DEFAULT_BULLET = BulletExample()
DEFAULT_COMPOUNDING = CompoundingExample()
