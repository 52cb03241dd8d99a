"""Tabular and text summaries of portfolio batches."""

from typing import Optional

import numpy as np
import pandas as pd

from portfolio_geometry.core.geometry import is_feasible, risk_return
from portfolio_geometry.core.inputs import ArrayLike, AssetSet


def portfolio_table(
    weights: ArrayLike,
    assets: AssetSet,
    cov_matrix: np.ndarray,
    target_returns: Optional[ArrayLike] = None
) -> pd.DataFrame:
    """
    Tabulate a batch of portfolios.

    One row per portfolio with a weight column per asset, followed by
    'mean', 'std' and 'feasible' (no short positions). When target returns
    are given (e.g. for an MVL curve) they are stored in a 'target' column.
    """
    w = np.atleast_2d(np.asarray(weights, dtype=float))
    stds, means = risk_return(w, assets, cov_matrix)

    table = pd.DataFrame(w, columns=assets.names)
    if target_returns is not None:
        table.insert(0, 'target', np.asarray(target_returns, dtype=float).ravel())
    table['mean'] = means
    table['std'] = stds
    table['feasible'] = is_feasible(w)
    return table


def summary_report(
    assets: AssetSet,
    cov_matrix: np.ndarray,
    portfolios: dict
) -> str:
    """
    Generate a plain-text summary of the assets and named portfolios.

    Args:
        assets: Asset set
        cov_matrix: Covariance matrix
        portfolios: Mapping of portfolio name -> Portfolio

    Returns:
        Formatted string report
    """
    lines = []
    lines.append("=" * 60)
    lines.append("PORTFOLIO GEOMETRY SUMMARY")
    lines.append("=" * 60)

    lines.append("\n--- Individual Asset Statistics ---")
    lines.append(f"{'Asset':<10} {'Mean':>10} {'Std Dev':>10} {'Variance':>10}")
    lines.append("-" * 43)
    for i, name in enumerate(assets.names):
        lines.append(
            f"{name:<10} {assets.returns[i]:>10.4f} "
            f"{assets.stddevs[i]:>10.4f} {cov_matrix[i, i]:>10.4f}"
        )

    for label, portfolio in portfolios.items():
        lines.append(f"\n--- {label} ---")
        lines.append("Weights:")
        for i, name in enumerate(assets.names):
            w = portfolio.weights[i]
            lines.append(f"  {name}: {w:.6f} ({w*100:.2f}%)")
        lines.append(f"Expected Return: {portfolio.expected_return:.6f}")
        lines.append(f"Standard Deviation: {portfolio.risk:.6f}")

    lines.append("\n" + "=" * 60)
    return "\n".join(lines)
