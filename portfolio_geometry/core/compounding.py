"""
Compounding Convergence
=======================

Value of one unit invested at nominal rate r, compounded m times per year,
against continuous compounding:

    periodic:   V_m(t) = (1 + r/m) ^ floor(t * m)
    continuous: V(t)   = exp(r * t)

As m grows the periodic step functions converge to the continuous curve,
since (1 + r/m)^m -> e^r.
"""

import logging
from typing import Dict, Iterable, Tuple, Union

import numpy as np

from portfolio_geometry.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

# Relative slack when counting elapsed periods and grid points, so that a
# time such as 7/12 that lands a rounding error short of a boundary still
# counts as reaching it
BOUNDARY_TOLERANCE = 1e-9

ArrayOrFloat = Union[float, np.ndarray]


def _check_rate(rate: float):
    if rate <= -1:
        raise InvalidInputError(f"Interest rate must be > -1, got {rate}")


def _check_frequency(m: int):
    if int(m) != m or m < 1:
        raise InvalidInputError(f"Compounding frequency must be a positive integer, got {m}")


def _count_steps(length: float, step: float) -> int:
    """Number of whole steps of size ``step`` that fit in ``length``."""
    return int(np.floor(length / step * (1 + BOUNDARY_TOLERANCE)))


def continuous_value(rate: float, t: ArrayOrFloat) -> ArrayOrFloat:
    """Value under continuous compounding, exp(r * t)."""
    _check_rate(rate)
    return np.exp(rate * np.asarray(t, dtype=float))


def periodic_value(rate: float, m: int, t: ArrayOrFloat) -> ArrayOrFloat:
    """
    Value under compounding m times per year.

    Interest is only credited at the end of each period, so the value is a
    step function of t.
    """
    _check_rate(rate)
    _check_frequency(m)

    elapsed = np.asarray(t, dtype=float) * m
    periods = np.floor(elapsed + BOUNDARY_TOLERANCE * np.maximum(1.0, np.abs(elapsed)))
    return (1 + rate / m) ** periods


def compounding_curves(
    rate: float,
    frequencies: Iterable[int],
    horizon: float,
    smooth_step: float = 0.001
) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    Sample the continuous curve and each periodic curve over [0, horizon].

    The continuous curve uses a grid of step ``smooth_step``. The curve for
    frequency m is sampled at t_k = k / m^2, so each period spans exactly m
    grid points and point k has completed k // m periods.

    Returns:
        Mapping of label -> (t, value). Labels are 'continuous' and 'm=<m>'.
    """
    if horizon <= 0:
        raise InvalidInputError(f"Horizon must be > 0, got {horizon}")
    if smooth_step <= 0:
        raise InvalidInputError(f"Grid step must be > 0, got {smooth_step}")

    curves = {}

    t_smooth = np.arange(_count_steps(horizon, smooth_step) + 1) * smooth_step
    curves['continuous'] = (t_smooth, continuous_value(rate, t_smooth))

    for m in frequencies:
        _check_frequency(m)
        m = int(m)
        k = np.arange(_count_steps(horizon, 1.0 / m ** 2) + 1)
        curves[f"m={m}"] = (k / m ** 2, (1 + rate / m) ** (k // m))

    logger.debug("Built %d compounding curves up to t=%s", len(curves), horizon)
    return curves
