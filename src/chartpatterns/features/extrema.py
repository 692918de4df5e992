"""
Local extrema detection over candle sequences.

Peaks come from the ``high`` series and troughs from the ``low`` series. A
candle qualifies only when it is strictly beyond every neighbour inside a
fixed-radius window, so flat tops and bottoms produce no extrema.
"""

from typing import Literal, Optional, Sequence

import numpy as np

from chartpatterns.core.models import Candle, ExtremumPoint

PriceField = Literal["open", "high", "low", "close"]

DEFAULT_RADIUS = 5


def price_array(candles: Sequence[Candle], field: PriceField) -> np.ndarray:
    """Extract one price column as a float array."""
    return np.fromiter((getattr(c, field) for c in candles), dtype=float, count=len(candles))


def _find_strict_extrema(values: np.ndarray, radius: int, maximum: bool) -> list[ExtremumPoint]:
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    n = len(values)
    points: list[ExtremumPoint] = []
    if n <= 2 * radius:
        return points

    for i in range(radius, n - radius):
        current = values[i]
        neighbours = np.concatenate((values[i - radius:i], values[i + 1:i + radius + 1]))
        if maximum:
            is_extremum = bool(np.all(current > neighbours))
        else:
            is_extremum = bool(np.all(current < neighbours))
        if is_extremum:
            points.append(ExtremumPoint(index=i, value=float(current)))

    return points


def find_peaks(candles: Sequence[Candle], radius: int = DEFAULT_RADIUS) -> list[ExtremumPoint]:
    """
    Find local maxima of the high series.

    Args:
        candles: Time-ascending candles
        radius: Number of candles compared on each side

    Returns:
        Peaks in ascending index order
    """
    return _find_strict_extrema(price_array(candles, "high"), radius, maximum=True)


def find_troughs(candles: Sequence[Candle], radius: int = DEFAULT_RADIUS) -> list[ExtremumPoint]:
    """Find local minima of the low series, in ascending index order."""
    return _find_strict_extrema(price_array(candles, "low"), radius, maximum=False)


def find_extreme_between(
    candles: Sequence[Candle],
    start: int,
    end: int,
    field: PriceField,
    mode: Literal["min", "max"],
) -> Optional[int]:
    """
    Locate the lowest (or highest) candle strictly between two indices.

    Ties resolve to the earliest candle. Returns None when the indices are
    adjacent and nothing lies between them.
    """
    if start >= end - 1:
        return None

    window = price_array(candles[start + 1:end], field)
    offset = int(np.argmin(window)) if mode == "min" else int(np.argmax(window))
    return start + 1 + offset


def relative_difference(a: float, b: float) -> float:
    """Absolute difference of two prices relative to the first."""
    if a == 0:
        return 0.0 if b == 0 else float("inf")
    return abs(a - b) / abs(a)
