"""Exceptions raised by the portfolio geometry computations."""


class PortfolioGeometryError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(PortfolioGeometryError, ValueError):
    """
    Raised when asset data, a correlation matrix or a weight batch is malformed.

    Covers wrong dimensions, asymmetric or non-PSD matrices, a non-unit
    correlation diagonal and non-positive standard deviations.
    """


class DegenerateSampleError(PortfolioGeometryError, ArithmeticError):
    """
    Raised when random weights cannot be normalized.

    Normal samples (short selling allowed) can sum to almost zero, which makes
    the division by the row sum blow up. Such rows are resampled a bounded
    number of times before this error is raised.
    """
