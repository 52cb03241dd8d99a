"""
Portfolio Geometry - Markowitz Bullet and Efficient Frontier
============================================================

Closed-form risk/return geometry of classical portfolio theory.

Usage:
    from portfolio_geometry import AssetSet, build_covariance, portfolio_risk
    from portfolio_geometry.visualization import build_bullet_figures

Classes:
    AssetSet - Expected returns and standard deviations
    CorrelationMatrix - Validated correlation matrix
    MVLCoefficients - Affine minimum-variance line w = a * mu + b
    MinimumVarianceSolver - Closed-form MVL for any number of assets

Functions:
    build_covariance - C = diag(sigma) R diag(sigma)
    evaluate_mvl - MVL weights for target returns
    portfolio_risk / portfolio_return - sqrt(w^T C w) and w . mu
    is_feasible - No-short-selling check
    random_portfolios - Random fully-invested weights
    two_asset_edge - Portfolios of two assets only
"""

from portfolio_geometry.core.errors import DegenerateSampleError, InvalidInputError
from portfolio_geometry.core.inputs import AssetSet, CorrelationMatrix, MVLCoefficients, Portfolio
from portfolio_geometry.core.geometry import (
    build_covariance,
    evaluate_mvl,
    is_feasible,
    portfolio_return,
    portfolio_risk,
    random_portfolios,
    two_asset_edge,
)
from portfolio_geometry.core.optimizer import MinimumVarianceSolver
from portfolio_geometry.config import BulletExample, CompoundingExample
from portfolio_geometry.log import setup_logger

__version__ = "1.0.0"

__all__ = [
    "AssetSet",
    "CorrelationMatrix",
    "MVLCoefficients",
    "Portfolio",
    "InvalidInputError",
    "DegenerateSampleError",
    "build_covariance",
    "evaluate_mvl",
    "portfolio_risk",
    "portfolio_return",
    "is_feasible",
    "random_portfolios",
    "two_asset_edge",
    "MinimumVarianceSolver",
    "BulletExample",
    "CompoundingExample",
    "setup_logger",
]
