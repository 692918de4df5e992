"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from chartpatterns.core import Candle

START_TIME = 1_704_067_200  # 2024-01-01 00:00:00 UTC
HOUR = 3600


def zigzag_candles(
    vertices: list[tuple[int, float]],
    spread: float = 0.5,
    start: int = START_TIME,
    step: int = HOUR,
) -> list[Candle]:
    """
    Build candles whose mid price interpolates linearly between vertices.

    high = mid + spread and low = mid - spread, so a vertex at mid ``m``
    produces a peak high of ``m + spread`` or a trough low of ``m - spread``.
    """
    xs, ys = zip(*vertices)
    n = xs[-1] + 1
    mid = np.interp(np.arange(n), xs, ys)
    return [
        Candle(
            time=start + i * step,
            open=float(m),
            high=float(m + spread),
            low=float(m - spread),
            close=float(m),
            volume=1000.0,
        )
        for i, m in enumerate(mid)
    ]


@pytest.fixture
def head_and_shoulders_candles():
    """100 candles: shoulders at 100, head at 110, flat neckline at 95."""
    return zigzag_candles([
        (0, 90.0),
        (20, 99.5),    # left shoulder high 100
        (35, 95.5),    # left valley low 95
        (50, 109.5),   # head high 110
        (65, 95.5),    # right valley low 95
        (80, 99.5),    # right shoulder high 100
        (99, 85.0),
    ])


@pytest.fixture
def inverse_head_and_shoulders_candles():
    """100 candles: shoulders at 100, head at 90, flat neckline at 105."""
    return zigzag_candles([
        (0, 110.0),
        (20, 100.5),   # left shoulder low 100
        (35, 104.5),   # left peak high 105
        (50, 90.5),    # head low 90
        (65, 104.5),   # right peak high 105
        (80, 100.5),   # right shoulder low 100
        (99, 115.0),
    ])


@pytest.fixture
def double_top_candles():
    """Peaks 0.5% apart (100.0 and 100.5) over a valley at 93.75."""
    return zigzag_candles(
        [(0, 90.0), (15, 99.75), (30, 94.0), (45, 100.25), (60, 90.0)],
        spread=0.25,
    )


@pytest.fixture
def double_bottom_candles():
    """Troughs 0.5% apart (100.0 and 100.5) under a peak at 106.25."""
    return zigzag_candles(
        [(0, 110.0), (15, 100.25), (30, 106.0), (45, 100.75), (60, 110.0)],
        spread=0.25,
    )


@pytest.fixture
def ascending_triangle_candles():
    """Flat resistance at 110.2 with support rising 1.5 per swing."""
    vertices = []
    for k in range(7):
        vertices.append((10 * k, 100.0 + 1.5 * k))
        if k < 6:
            vertices.append((10 * k + 5, 110.0))
    return zigzag_candles(vertices, spread=0.2)


@pytest.fixture
def descending_triangle_candles():
    """Resistance falling 1.5 per swing with flat support at 99.8."""
    vertices = []
    for k in range(7):
        vertices.append((10 * k, 100.0))
        if k < 6:
            vertices.append((10 * k + 5, 120.0 - 1.5 * k))
    return zigzag_candles(vertices, spread=0.2)


@pytest.fixture
def symmetrical_triangle_candles():
    """Resistance falling and support rising at the same rate."""
    vertices = []
    for k in range(7):
        vertices.append((10 * k, 100.0 + 1.5 * k))
        if k < 6:
            vertices.append((10 * k + 5, 120.0 - 1.5 * k))
    return zigzag_candles(vertices, spread=0.2)


@pytest.fixture
def rising_candles():
    """Strictly increasing prices with no local extrema."""
    return [
        Candle(
            time=START_TIME + i * HOUR,
            open=100.0 + i,
            high=100.5 + i,
            low=99.5 + i,
            close=100.0 + i,
            volume=1000.0,
        )
        for i in range(80)
    ]


@pytest.fixture
def random_walk_candles():
    """Generate noisy random-walk OHLCV candles."""
    np.random.seed(42)
    n = 200

    close = 500 + np.cumsum(np.random.randn(n) * 2)
    high = close + abs(np.random.randn(n))
    low = close - abs(np.random.randn(n))
    open_ = close + np.random.randn(n) * 0.5
    volume = np.random.randint(1000000, 5000000, n)

    return [
        Candle(
            time=START_TIME + i * HOUR,
            open=float(open_[i]),
            high=float(max(high[i], open_[i])),
            low=float(min(low[i], open_[i])),
            close=float(close[i]),
            volume=float(volume[i]),
        )
        for i in range(n)
    ]


@pytest.fixture
def trending_noisy_candles():
    """Strong uptrend (1% per candle) with small multiplicative noise."""
    np.random.seed(7)
    n = 120

    trend = 100 * np.exp(0.01 * np.arange(n))
    close = trend * (1 + 0.003 * np.random.randn(n))
    high = close * (1 + 0.002 * abs(np.random.randn(n)))
    low = close * (1 - 0.002 * abs(np.random.randn(n)))

    return [
        Candle(
            time=START_TIME + i * HOUR,
            open=float(close[i - 1] if i else close[0]),
            high=float(max(high[i], close[i - 1] if i else close[0])),
            low=float(min(low[i], close[i - 1] if i else close[0])),
            close=float(close[i]),
            volume=1000.0,
        )
        for i in range(n)
    ]
