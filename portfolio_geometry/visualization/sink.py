"""
Plot Sinks
==========

The figure builders never draw anything themselves. They hand coordinate
series to a sink, and the sink decides what to do with them (render with a
plotting library, record for tests, export as a table, ...).

PlotSink - protocol every sink satisfies
SeriesRecorder - in-memory sink, convertible to a pandas DataFrame
"""

from dataclasses import dataclass
from typing import List, Protocol

import numpy as np
import pandas as pd

from portfolio_geometry.core.errors import InvalidInputError

SERIES_KINDS = ("line", "scatter", "fill", "point")


class PlotSink(Protocol):
    """Receives (x, y) coordinate sequences with a label."""

    def add_series(self, x, y, label: str, kind: str = "line") -> None:
        ...


@dataclass(frozen=True, eq=False)
class Series:
    label: str
    kind: str
    x: np.ndarray
    y: np.ndarray


class SeriesRecorder:
    """
    Sink that keeps every series in memory.

    Attributes:
        name (str): Figure name, copied into ``to_frame``
        series (List[Series]): Recorded series in insertion order
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.series: List[Series] = []

    def add_series(self, x, y, label: str, kind: str = "line") -> None:
        if kind not in SERIES_KINDS:
            raise InvalidInputError(f"Unknown series kind '{kind}', expected one of {SERIES_KINDS}")

        x = np.asarray(x, dtype=float).ravel()
        y = np.asarray(y, dtype=float).ravel()
        if x.shape != y.shape:
            raise InvalidInputError(
                f"Series '{label}' has {len(x)} x values but {len(y)} y values"
            )
        self.series.append(Series(label, kind, x, y))

    @property
    def labels(self) -> List[str]:
        return [s.label for s in self.series]

    def get(self, label: str) -> Series:
        for s in self.series:
            if s.label == label:
                return s
        raise KeyError(label)

    def to_frame(self) -> pd.DataFrame:
        """Long-format table: one row per point with figure, label, kind, x, y."""
        frames = [
            pd.DataFrame({
                'figure': self.name,
                'label': s.label,
                'kind': s.kind,
                'x': s.x,
                'y': s.y,
            })
            for s in self.series
        ]
        if not frames:
            return pd.DataFrame(columns=['figure', 'label', 'kind', 'x', 'y'])
        return pd.concat(frames, ignore_index=True)
