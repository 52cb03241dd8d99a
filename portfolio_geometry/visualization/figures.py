"""
Figure Builders
===============

Feed the coordinate series of the classic Markowitz bullet figures into a
PlotSink:

1. Weights plane (w2, w3) with short selling: budget lines, no-short
   triangle, theoretical MVL
2. Risk-return plane (sigma, mu) with short selling: random clouds,
   extended two-asset edges, MVL (the bullet)
3. Weights plane without short selling: feasible part of the MVL inside the
   triangle
4. Risk-return plane without short selling: long-only cloud, two-asset
   edges, efficient frontier

plus the compounding convergence figure. Styling, layout and file export
belong to whatever sink renders the series.
"""

import logging
from itertools import combinations
from typing import Callable, Dict, Optional

import numpy as np

from portfolio_geometry.config import (
    DEFAULT_BULLET,
    DEFAULT_COMPOUNDING,
    BulletExample,
    CompoundingExample,
)
from portfolio_geometry.core.compounding import compounding_curves
from portfolio_geometry.core.errors import InvalidInputError
from portfolio_geometry.core.geometry import (
    covariance_for,
    evaluate_mvl,
    is_feasible,
    portfolio_risk,
    random_portfolios,
    risk_return,
    two_asset_edge,
)
from portfolio_geometry.core.inputs import MVLCoefficients
from portfolio_geometry.visualization.sink import PlotSink, SeriesRecorder

logger = logging.getLogger(__name__)

# Vertices of the no-short-selling triangle in the (w2, w3) plane
TRIANGLE_X = np.array([0.0, 1.0, 0.0])
TRIANGLE_Y = np.array([0.0, 0.0, 1.0])

# Extent of the budget lines in the weights plane
BUDGET_EXTENT = np.array([-0.5, 1.5])

FIGURE_NAMES = (
    "weights_plane_short",
    "risk_return_short",
    "weights_plane_long_only",
    "risk_return_long_only",
)


class BulletGeometry:
    """
    Everything the bullet figures share, computed once.

    Attributes:
        assets (AssetSet): The example's assets
        cov_matrix (np.ndarray): Covariance matrix
        targets (np.ndarray): Target returns along the MVL
        mvl_weights (np.ndarray): MVL weights, one row per target
        mvl_risk (np.ndarray): Risk of each MVL portfolio
        feasible (np.ndarray): Mask of MVL points without short positions
    """

    def __init__(
        self,
        example: BulletExample = DEFAULT_BULLET,
        coefficients: Optional[MVLCoefficients] = None
    ):
        self.example = example
        self.assets = example.assets()
        self.cov_matrix = covariance_for(self.assets, example.correlation())

        if coefficients is None:
            coefficients = example.coefficients()
        if coefficients.n_assets != self.assets.n_assets:
            raise InvalidInputError(
                f"MVL coefficients cover {coefficients.n_assets} assets, "
                f"example has {self.assets.n_assets}"
            )

        self.targets = example.target_returns()
        self.mvl_weights = evaluate_mvl(coefficients, self.targets)
        self.mvl_risk = portfolio_risk(self.mvl_weights, self.cov_matrix)
        self.feasible = is_feasible(self.mvl_weights)

    def random_cloud(self, allow_short: bool, rng: Optional[np.random.Generator] = None):
        """(risks, returns) of the example's random portfolio cloud."""
        weights = random_portfolios(
            self.example.n_random, self.assets.n_assets, allow_short, rng
        )
        return risk_return(weights, self.assets, self.cov_matrix)


def _require_three_assets(geometry: BulletGeometry):
    if geometry.assets.n_assets != 3:
        raise InvalidInputError(
            f"The (w2, w3) weights plane needs exactly 3 assets, got {geometry.assets.n_assets}"
        )


def _add_assets(sink: PlotSink, geometry: BulletGeometry):
    sink.add_series(geometry.assets.stddevs, geometry.assets.returns, "Assets", kind="point")


def _add_edges(sink: PlotSink, geometry: BulletGeometry, allow_short: bool):
    n_assets = geometry.assets.n_assets
    weight_range = geometry.example.edge_weights(allow_short)

    for i, j in combinations(range(n_assets), 2):
        edge = two_asset_edge(i, j, n_assets, weight_range)
        risks, returns = risk_return(edge, geometry.assets, geometry.cov_matrix)
        label = f"{geometry.assets.names[i]}-{geometry.assets.names[j]} Edge"
        sink.add_series(risks, returns, label)


def weights_plane_short(sink: PlotSink, geometry: BulletGeometry) -> PlotSink:
    """Figure 1: feasible portfolios on the (w2, w3) plane, short selling allowed."""
    _require_three_assets(geometry)

    sink.add_series(TRIANGLE_X, TRIANGLE_Y, "No Short-Selling Region", kind="fill")

    # w3 = 0, w2 = 0 and w1 = 0 (w2 + w3 = 1)
    sink.add_series(BUDGET_EXTENT, np.zeros(2), "Budget Limit w3=0")
    sink.add_series(np.zeros(2), BUDGET_EXTENT, "Budget Limit w2=0")
    sink.add_series(BUDGET_EXTENT, 1 - BUDGET_EXTENT, "Budget Limit w1=0")

    sink.add_series(geometry.mvl_weights[:, 1], geometry.mvl_weights[:, 2], "Theoretical MVL")
    sink.add_series(TRIANGLE_X, TRIANGLE_Y, "Assets", kind="point")

    logger.info("Built weights plane (short selling allowed)")
    return sink


def risk_return_short(
    sink: PlotSink,
    geometry: BulletGeometry,
    short_cloud: tuple,
    long_cloud: tuple
) -> PlotSink:
    """Figure 2: the Markowitz bullet in the (sigma, mu) plane, short selling allowed."""
    sink.add_series(*short_cloud, "Short Selling Allowed", kind="scatter")
    sink.add_series(*long_cloud, "No Short Selling Area", kind="scatter")

    _add_edges(sink, geometry, allow_short=True)

    sink.add_series(geometry.mvl_risk, geometry.targets, "MVL")
    _add_assets(sink, geometry)

    logger.info("Built risk-return plane (short selling allowed)")
    return sink


def weights_plane_long_only(sink: PlotSink, geometry: BulletGeometry) -> PlotSink:
    """Figure 3: the MVL inside the no-short-selling triangle."""
    _require_three_assets(geometry)

    w = geometry.mvl_weights
    mask = geometry.feasible

    sink.add_series(TRIANGLE_X, TRIANGLE_Y, "Feasible Triangle", kind="fill")
    sink.add_series(w[:, 1], w[:, 2], "Theoretical MVL")
    sink.add_series(w[mask, 1], w[mask, 2], "Feasible MVL")
    sink.add_series(TRIANGLE_X, TRIANGLE_Y, "Assets", kind="point")

    logger.info("Built weights plane (no short selling), %d feasible MVL points", int(mask.sum()))
    return sink


def risk_return_long_only(
    sink: PlotSink,
    geometry: BulletGeometry,
    long_cloud: tuple
) -> PlotSink:
    """Figure 4: risk-return plane with the frontier constrained by w_i >= 0."""
    sink.add_series(*long_cloud, "Long Only Portfolios", kind="scatter")

    _add_edges(sink, geometry, allow_short=False)

    mask = geometry.feasible
    sink.add_series(
        geometry.mvl_risk[mask], geometry.targets[mask], "Efficient Frontier (Long only)"
    )
    _add_assets(sink, geometry)

    logger.info("Built risk-return plane (no short selling)")
    return sink


def build_bullet_figures(
    example: BulletExample = DEFAULT_BULLET,
    sink_factory: Callable[[str], PlotSink] = SeriesRecorder,
    rng: Optional[np.random.Generator] = None,
    coefficients: Optional[MVLCoefficients] = None
) -> Dict[str, PlotSink]:
    """
    Build all four bullet figures.

    The long-only random cloud is sampled once and shared by figures 2 and 4.

    Args:
        example: Asset data and grid settings
        sink_factory: Called with each figure name to create its sink
        rng: Random generator for the portfolio clouds
        coefficients: MVL coefficients (default: the example's precomputed ones)

    Returns:
        Mapping of figure name -> sink, in FIGURE_NAMES order
    """
    if rng is None:
        rng = np.random.default_rng()

    geometry = BulletGeometry(example, coefficients)
    short_cloud = geometry.random_cloud(allow_short=True, rng=rng)
    long_cloud = geometry.random_cloud(allow_short=False, rng=rng)

    sinks = {name: sink_factory(name) for name in FIGURE_NAMES}
    weights_plane_short(sinks["weights_plane_short"], geometry)
    risk_return_short(sinks["risk_return_short"], geometry, short_cloud, long_cloud)
    weights_plane_long_only(sinks["weights_plane_long_only"], geometry)
    risk_return_long_only(sinks["risk_return_long_only"], geometry, long_cloud)
    return sinks


def compounding_convergence(
    sink: PlotSink,
    example: CompoundingExample = DEFAULT_COMPOUNDING
) -> PlotSink:
    """Convergence of periodic compounding to continuous compounding."""
    curves = compounding_curves(
        example.rate, example.frequencies, example.horizon, example.smooth_step
    )
    for label, (t, value) in curves.items():
        sink.add_series(t, value, "Continuous" if label == "continuous" else label)

    logger.info("Built compounding convergence with %d curves", len(curves))
    return sink
