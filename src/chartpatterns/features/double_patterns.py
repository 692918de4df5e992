"""
Double Top and Double Bottom detection.

Two same-type extrema within 1% of each other, separated by an opposing
extreme that serves as the neckline.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Literal, Optional, Sequence

from chartpatterns.config import get_logger
from chartpatterns.core.models import (
    Candle,
    DoublePatternMetrics,
    ExtremumPoint,
    KeyPointKind,
    LineRole,
    LineStyle,
    PatternAnalysis,
    PatternKeyPoint,
    PatternKind,
    PatternLine,
    PatternVisualization,
)
from chartpatterns.features.extrema import (
    DEFAULT_RADIUS,
    find_extreme_between,
    find_peaks,
    find_troughs,
    relative_difference,
)
from chartpatterns.features.scoring import ConfidencePolicy, DefaultConfidencePolicy

logger = get_logger("features.double_patterns")

MAX_PRICE_DIFF = 0.01
MIN_CANDIDATE_CONFIDENCE = 0.6
MAX_RESULTS = 2

DoubleKind = Literal["top", "bottom"]


@dataclass(frozen=True)
class DoublePatternValidation:
    """Outcome of checking one (first, second) pair."""
    is_valid: bool
    confidence: float = 0.0
    price_diff: float = 0.0
    neckline_index: Optional[int] = None


_REJECTED = DoublePatternValidation(is_valid=False)


def validate_double_pattern(
    candles: Sequence[Candle],
    first: ExtremumPoint,
    second: ExtremumPoint,
    kind: DoubleKind,
    policy: Optional[ConfidencePolicy] = None,
) -> DoublePatternValidation:
    """Check price similarity and locate the neckline between the two extrema."""
    if first.index >= second.index:
        return _REJECTED

    price_diff = relative_difference(first.value, second.value)
    if price_diff > MAX_PRICE_DIFF:
        return _REJECTED

    if kind == "top":
        neckline = find_extreme_between(candles, first.index, second.index, "low", "min")
    else:
        neckline = find_extreme_between(candles, first.index, second.index, "high", "max")
    if neckline is None:
        return _REJECTED

    policy = policy or DefaultConfidencePolicy()
    return DoublePatternValidation(
        is_valid=True,
        confidence=policy.double_pattern(price_diff),
        price_diff=price_diff,
        neckline_index=neckline,
    )


def build_double_pattern(
    candles: Sequence[Candle],
    first: ExtremumPoint,
    second: ExtremumPoint,
    validation: DoublePatternValidation,
    kind: DoubleKind,
) -> PatternAnalysis:
    """Assemble key points, neckline and trade levels for a double pattern."""
    if not validation.is_valid or validation.neckline_index is None:
        raise ValueError("Cannot build a pattern from a rejected candidate")

    top = kind == "top"
    neck_idx = validation.neckline_index
    neckline = candles[neck_idx].low if top else candles[neck_idx].high
    extreme_kind = KeyPointKind.PEAK if top else KeyPointKind.TROUGH
    neck_kind = KeyPointKind.TROUGH if top else KeyPointKind.PEAK

    key_points = (
        PatternKeyPoint(
            time=candles[first.index].time,
            value=first.value,
            kind=extreme_kind,
            label="T1" if top else "B1",
        ),
        PatternKeyPoint(time=candles[neck_idx].time, value=neckline, kind=neck_kind, label="N"),
        PatternKeyPoint(
            time=candles[second.index].time,
            value=second.value,
            kind=extreme_kind,
            label="T2" if top else "B2",
        ),
    )

    dashed = LineStyle(line_style="dashed")
    visualization = PatternVisualization(
        key_points=key_points,
        lines=(
            PatternLine(from_index=0, to_index=1, role=LineRole.OUTLINE, style=dashed),
            PatternLine(from_index=1, to_index=2, role=LineRole.OUTLINE, style=dashed),
            # Horizontal level anchored at the neckline point
            PatternLine(
                from_index=1,
                to_index=1,
                role=LineRole.NECKLINE,
                style=LineStyle(color="#ff0000", line_width=2),
            ),
        ),
    )

    height = abs(first.value - neckline)
    target = neckline - height if top else neckline + height
    stop = max(first.value, second.value) if top else min(first.value, second.value)

    metrics = DoublePatternMetrics(
        formation_period=second.index - first.index + 1,
        symmetry=1 - validation.price_diff,
        breakout_level=neckline,
        target_level=target,
        stop_loss=stop,
        first_peak_price=first.value,
        second_peak_price=second.value,
        valley_price=neckline,
    )

    pattern_kind = PatternKind.DOUBLE_TOP if top else PatternKind.DOUBLE_BOTTOM
    return PatternAnalysis(
        pattern_kind=pattern_kind,
        start_time=candles[first.index].time,
        end_time=candles[second.index].time,
        start_index=first.index,
        end_index=second.index,
        confidence=validation.confidence,
        visualization=visualization,
        metrics=metrics,
        directional_bias=pattern_kind.bias,
    )


def detect_double_pattern(
    candles: Sequence[Candle],
    kind: DoubleKind,
    radius: int = DEFAULT_RADIUS,
    policy: Optional[ConfidencePolicy] = None,
) -> list[PatternAnalysis]:
    """
    Detect Double Top (kind="top") or Double Bottom (kind="bottom") patterns.

    Returns:
        Up to two patterns, highest confidence first
    """
    extremes = find_peaks(candles, radius) if kind == "top" else find_troughs(candles, radius)
    if len(extremes) < 2:
        return []

    patterns = []
    for first, second in combinations(extremes, 2):
        validation = validate_double_pattern(candles, first, second, kind, policy)
        if validation.is_valid and validation.confidence >= MIN_CANDIDATE_CONFIDENCE:
            patterns.append(build_double_pattern(candles, first, second, validation, kind))

    logger.debug(f"Double {kind}: {len(extremes)} extrema, {len(patterns)} accepted")

    patterns.sort(key=lambda p: p.confidence, reverse=True)
    return patterns[:MAX_RESULTS]
