"""Core computational modules for portfolio geometry."""

from portfolio_geometry.core.errors import (
    DegenerateSampleError,
    InvalidInputError,
    PortfolioGeometryError,
)
from portfolio_geometry.core.inputs import AssetSet, CorrelationMatrix, MVLCoefficients, Portfolio
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
from portfolio_geometry.core.optimizer import MinimumVarianceSolver
from portfolio_geometry.core.compounding import compounding_curves, continuous_value, periodic_value
from portfolio_geometry.core.report import portfolio_table, summary_report

__all__ = [
    "AssetSet",
    "CorrelationMatrix",
    "MVLCoefficients",
    "Portfolio",
    "PortfolioGeometryError",
    "InvalidInputError",
    "DegenerateSampleError",
    "build_covariance",
    "covariance_for",
    "evaluate_mvl",
    "portfolio_variance",
    "portfolio_risk",
    "portfolio_return",
    "risk_return",
    "is_feasible",
    "efficient_segment",
    "random_portfolios",
    "two_asset_edge",
    "make_portfolio",
    "MinimumVarianceSolver",
    "continuous_value",
    "periodic_value",
    "compounding_curves",
    "portfolio_table",
    "summary_report",
]
