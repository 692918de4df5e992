"""
Triangle detection (ascending, descending, symmetrical).

Swing highs and swing lows inside a trailing window are fitted with
independent least-squares lines; the pair of slopes decides the triangle
kind. Windows grow from 20 to 60 candles in steps of 5.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from chartpatterns.config import get_logger
from chartpatterns.core.models import (
    Candle,
    ExtremumPoint,
    KeyPointKind,
    LineRole,
    LineStyle,
    PatternAnalysis,
    PatternArea,
    PatternKeyPoint,
    PatternKind,
    PatternLine,
    PatternVisualization,
    TriangleMetrics,
)
from chartpatterns.features.extrema import DEFAULT_RADIUS, find_peaks, find_troughs
from chartpatterns.features.scoring import ConfidencePolicy, DefaultConfidencePolicy
from chartpatterns.features.trendline import FLAT_SLOPE_THRESHOLD, TrendLine, fit_trend_line

logger = get_logger("features.triangles")

MIN_PATTERN_BARS = 20
MAX_WINDOW = 60
WINDOW_STEP = 5
MIN_CANDIDATE_CONFIDENCE = 0.6
MAX_RESULTS = 2

TRIANGLE_KINDS = (
    PatternKind.ASCENDING_TRIANGLE,
    PatternKind.DESCENDING_TRIANGLE,
    PatternKind.SYMMETRICAL_TRIANGLE,
)

_FILL = {
    PatternKind.ASCENDING_TRIANGLE: "#00ff00",
    PatternKind.DESCENDING_TRIANGLE: "#ff0000",
    PatternKind.SYMMETRICAL_TRIANGLE: "#0000ff",
}


@dataclass(frozen=True)
class TriangleValidation:
    """Outcome of fitting one window's swing points."""
    is_valid: bool
    confidence: float = 0.0
    upper: Optional[TrendLine] = None
    lower: Optional[TrendLine] = None


_REJECTED = TriangleValidation(is_valid=False)


def classify_triangle(
    upper: TrendLine,
    lower: TrendLine,
    threshold: float = FLAT_SLOPE_THRESHOLD,
) -> Optional[PatternKind]:
    """
    Classify a pair of edge lines.

    | Kind        | Upper slope | Lower slope |
    |-------------|-------------|-------------|
    | ascending   | ~0          | > 0         |
    | descending  | < 0         | ~0          |
    | symmetrical | < 0         | > 0         |
    """
    if upper.is_flat(threshold) and lower.slope > threshold:
        return PatternKind.ASCENDING_TRIANGLE
    if upper.slope < -threshold and lower.is_flat(threshold):
        return PatternKind.DESCENDING_TRIANGLE
    if upper.slope < -threshold and lower.slope > threshold:
        return PatternKind.SYMMETRICAL_TRIANGLE
    return None


def validate_triangle(
    highs: Sequence[ExtremumPoint],
    lows: Sequence[ExtremumPoint],
    kind: PatternKind,
    policy: Optional[ConfidencePolicy] = None,
) -> TriangleValidation:
    """Fit both edges and check that they form the requested triangle kind."""
    if kind not in TRIANGLE_KINDS:
        raise ValueError(f"Not a triangle kind: {kind}")
    if len(highs) < 2 or len(lows) < 2:
        return _REJECTED

    policy = policy or DefaultConfidencePolicy()
    upper = fit_trend_line(highs)
    lower = fit_trend_line(lows)

    if classify_triangle(upper, lower) != kind:
        return _REJECTED

    return TriangleValidation(
        is_valid=True,
        confidence=policy.triangle(kind, upper.slope, lower.slope),
        upper=upper,
        lower=lower,
    )


def build_triangle(
    candles: Sequence[Candle],
    highs: Sequence[ExtremumPoint],
    lows: Sequence[ExtremumPoint],
    validation: TriangleValidation,
    kind: PatternKind,
    lookback: int,
) -> PatternAnalysis:
    """Assemble key points, edge lines and breakout levels for a triangle."""
    if not validation.is_valid or validation.upper is None or validation.lower is None:
        raise ValueError("Cannot build a pattern from a rejected candidate")

    labelled = [(h, KeyPointKind.PEAK, f"H{i + 1}") for i, h in enumerate(highs)]
    labelled += [(l, KeyPointKind.TROUGH, f"L{i + 1}") for i, l in enumerate(lows)]
    labelled.sort(key=lambda item: item[0].index)

    key_points = tuple(
        PatternKeyPoint(time=candles[p.index].time, value=p.value, kind=k, label=label)
        for p, k, label in labelled
    )
    high_positions = [i for i, (_, k, _) in enumerate(labelled) if k == KeyPointKind.PEAK]
    low_positions = [i for i, (_, k, _) in enumerate(labelled) if k == KeyPointKind.TROUGH]

    visualization = PatternVisualization(
        key_points=key_points,
        lines=(
            PatternLine(
                from_index=high_positions[0],
                to_index=high_positions[-1],
                role=LineRole.RESISTANCE,
                style=LineStyle(color="#ff0000", line_width=2),
            ),
            PatternLine(
                from_index=low_positions[0],
                to_index=low_positions[-1],
                role=LineRole.SUPPORT,
                style=LineStyle(color="#00ff00", line_width=2),
            ),
        ),
        areas=(
            PatternArea(
                points=tuple(range(len(key_points))),
                fill_color=_FILL[kind],
                opacity=0.1,
            ),
        ),
    )

    last_high = highs[-1].value
    last_low = lows[-1].value
    height = abs(highs[0].value - lows[0].value)

    if kind == PatternKind.ASCENDING_TRIANGLE:
        breakout = last_high
        target, stop = breakout + height, last_low
    elif kind == PatternKind.DESCENDING_TRIANGLE:
        breakout = last_low
        target, stop = breakout - height, last_high
    else:
        # Breakout side is unknown until price leaves the apex
        breakout = (last_high + last_low) / 2
        target, stop = None, None

    start_index = min(highs[0].index, lows[0].index)
    end_index = max(highs[-1].index, lows[-1].index)

    metrics = TriangleMetrics(
        formation_period=end_index - start_index + 1,
        breakout_level=breakout,
        target_level=target,
        stop_loss=stop,
        upper_bound=max(h.value for h in highs),
        lower_bound=min(l.value for l in lows),
        upper_slope=validation.upper.slope,
        lower_slope=validation.lower.slope,
        lookback=lookback,
    )

    return PatternAnalysis(
        pattern_kind=kind,
        start_time=candles[start_index].time,
        end_time=candles[end_index].time,
        start_index=start_index,
        end_index=end_index,
        confidence=validation.confidence,
        visualization=visualization,
        metrics=metrics,
        directional_bias=kind.bias,
    )


def detect_triangle(
    candles: Sequence[Candle],
    kind: PatternKind,
    radius: int = DEFAULT_RADIUS,
    policy: Optional[ConfidencePolicy] = None,
) -> list[PatternAnalysis]:
    """
    Detect one triangle kind across trailing windows.

    Returns:
        Up to two patterns, highest confidence first
    """
    n = len(candles)
    if n < MIN_PATTERN_BARS:
        return []

    highs = find_peaks(candles, radius)
    lows = find_troughs(candles, radius)

    # Outside bars are both a swing high and a swing low; drop them
    ambiguous = {h.index for h in highs} & {l.index for l in lows}
    if ambiguous:
        highs = [h for h in highs if h.index not in ambiguous]
        lows = [l for l in lows if l.index not in ambiguous]

    if len(highs) < 2 or len(lows) < 2:
        return []

    patterns = []
    seen: set[tuple[tuple[int, ...], tuple[int, ...]]] = set()
    for lookback in range(MIN_PATTERN_BARS, min(MAX_WINDOW, n) + 1, WINDOW_STEP):
        cutoff = n - lookback
        recent_highs = [h for h in highs if h.index >= cutoff]
        recent_lows = [l for l in lows if l.index >= cutoff]
        if len(recent_highs) < 2 or len(recent_lows) < 2:
            continue

        swing_key = (
            tuple(h.index for h in recent_highs),
            tuple(l.index for l in recent_lows),
        )
        if swing_key in seen:
            continue
        seen.add(swing_key)

        validation = validate_triangle(recent_highs, recent_lows, kind, policy)
        if validation.is_valid and validation.confidence >= MIN_CANDIDATE_CONFIDENCE:
            patterns.append(build_triangle(
                candles, recent_highs, recent_lows, validation, kind, lookback
            ))

    logger.debug(f"{kind.value}: {len(seen)} distinct windows, {len(patterns)} accepted")

    patterns.sort(key=lambda p: p.confidence, reverse=True)
    return patterns[:MAX_RESULTS]
