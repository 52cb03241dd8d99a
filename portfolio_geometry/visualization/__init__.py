"""Coordinate series for portfolio figures, handed to an injected sink."""

from portfolio_geometry.visualization.sink import PlotSink, SeriesRecorder
from portfolio_geometry.visualization.figures import (
    BulletGeometry,
    build_bullet_figures,
    compounding_convergence,
    risk_return_long_only,
    risk_return_short,
    weights_plane_long_only,
    weights_plane_short,
)

__all__ = [
    "PlotSink",
    "SeriesRecorder",
    "BulletGeometry",
    "build_bullet_figures",
    "weights_plane_short",
    "risk_return_short",
    "weights_plane_long_only",
    "risk_return_long_only",
    "compounding_convergence",
]
