"""Least-squares trend lines through swing points."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from chartpatterns.core.models import ExtremumPoint

FLAT_SLOPE_THRESHOLD = 0.001


@dataclass(frozen=True)
class TrendLine:
    """Line ``value = slope * index + intercept``."""
    slope: float
    intercept: float

    def is_flat(self, threshold: float = FLAT_SLOPE_THRESHOLD) -> bool:
        return abs(self.slope) < threshold


def fit_trend_line(points: Sequence[ExtremumPoint]) -> TrendLine:
    """
    Ordinary least squares of value on candle index.

    Fewer than two points cannot define a direction, so the line is flat:
    through the lone point when there is one, at zero otherwise.
    """
    if len(points) == 0:
        return TrendLine(slope=0.0, intercept=0.0)
    if len(points) == 1:
        return TrendLine(slope=0.0, intercept=float(points[0].value))

    x = np.array([p.index for p in points], dtype=float)
    y = np.array([p.value for p in points], dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    return TrendLine(slope=float(slope), intercept=float(intercept))
