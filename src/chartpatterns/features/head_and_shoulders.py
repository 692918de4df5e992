"""
Head and Shoulders detection.

Regular H&S: three peaks with a higher middle one, bearish reversal at a top.
Inverse H&S: three troughs with a lower middle one, bullish reversal at a bottom.

Every ordered triple of extrema is evaluated. The scan is cubic in the number
of extrema, which the caller keeps small by bounding the lookback window.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Optional, Sequence

from chartpatterns.config import get_logger
from chartpatterns.core.models import (
    Candle,
    HeadAndShouldersMetrics,
    KeyPointKind,
    LineRole,
    LineStyle,
    PatternAnalysis,
    PatternArea,
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

logger = get_logger("features.head_and_shoulders")

MIN_PATTERN_BARS = 15
MAX_SHOULDER_DIFF = 0.03
MIN_CANDIDATE_CONFIDENCE = 0.6
MAX_RESULTS = 3


@dataclass(frozen=True)
class HeadAndShouldersValidation:
    """Outcome of checking one (left, head, right) candidate."""
    is_valid: bool
    confidence: float = 0.0
    shoulder_diff: float = 0.0
    neckline_diff: float = 0.0
    time_symmetry: float = 0.0
    neckline_indices: Optional[tuple[int, int]] = None


_REJECTED = HeadAndShouldersValidation(is_valid=False)


def validate_head_and_shoulders(
    candles: Sequence[Candle],
    left: int,
    head: int,
    right: int,
    inverse: bool = False,
    policy: Optional[ConfidencePolicy] = None,
) -> HeadAndShouldersValidation:
    """
    Check the geometric rules for a head-and-shoulders candidate.

    Rules:
        1. Head beyond both shoulders (higher for regular, lower for inverse)
        2. Shoulders within 3% of each other
        3. A neckline point strictly between each shoulder and the head

    Neckline tilt only lowers confidence, it never rejects.
    """
    policy = policy or DefaultConfidencePolicy()
    if not left < head < right:
        return _REJECTED

    extreme_field = "low" if inverse else "high"
    neck_field = "high" if inverse else "low"

    ls = getattr(candles[left], extreme_field)
    hd = getattr(candles[head], extreme_field)
    rs = getattr(candles[right], extreme_field)

    if inverse:
        if hd >= ls or hd >= rs:
            return _REJECTED
    elif hd <= ls or hd <= rs:
        return _REJECTED

    shoulder_diff = relative_difference(ls, rs)
    if shoulder_diff > MAX_SHOULDER_DIFF:
        return _REJECTED

    mode = "max" if inverse else "min"
    left_neck = find_extreme_between(candles, left, head, neck_field, mode)
    right_neck = find_extreme_between(candles, head, right, neck_field, mode)
    if left_neck is None or right_neck is None:
        return _REJECTED

    neckline_diff = relative_difference(
        getattr(candles[left_neck], neck_field),
        getattr(candles[right_neck], neck_field),
    )

    left_span = head - left
    right_span = right - head
    time_symmetry = 1 - abs(left_span - right_span) / max(left_span, right_span)

    confidence = policy.head_and_shoulders(shoulder_diff, neckline_diff, time_symmetry)

    return HeadAndShouldersValidation(
        is_valid=True,
        confidence=confidence,
        shoulder_diff=shoulder_diff,
        neckline_diff=neckline_diff,
        time_symmetry=time_symmetry,
        neckline_indices=(left_neck, right_neck),
    )


def build_head_and_shoulders(
    candles: Sequence[Candle],
    left: int,
    head: int,
    right: int,
    validation: HeadAndShouldersValidation,
    inverse: bool = False,
) -> PatternAnalysis:
    """Assemble key points, drawing skeleton and trade levels."""
    if not validation.is_valid or validation.neckline_indices is None:
        raise ValueError("Cannot build a pattern from a rejected candidate")

    left_neck, right_neck = validation.neckline_indices
    extreme_field = "low" if inverse else "high"
    neck_field = "high" if inverse else "low"
    extreme_kind = KeyPointKind.TROUGH if inverse else KeyPointKind.PEAK
    neck_kind = KeyPointKind.PEAK if inverse else KeyPointKind.TROUGH

    ls_price = getattr(candles[left], extreme_field)
    head_price = getattr(candles[head], extreme_field)
    rs_price = getattr(candles[right], extreme_field)
    lv_price = getattr(candles[left_neck], neck_field)
    rv_price = getattr(candles[right_neck], neck_field)

    neckline = (lv_price + rv_price) / 2
    height = abs(head_price - neckline)
    target = neckline + height if inverse else neckline - height

    key_points = (
        PatternKeyPoint(time=candles[left].time, value=ls_price, kind=extreme_kind, label="LS"),
        PatternKeyPoint(time=candles[left_neck].time, value=lv_price, kind=neck_kind, label="LV"),
        PatternKeyPoint(time=candles[head].time, value=head_price, kind=extreme_kind, label="H"),
        PatternKeyPoint(time=candles[right_neck].time, value=rv_price, kind=neck_kind, label="RV"),
        PatternKeyPoint(time=candles[right].time, value=rs_price, kind=extreme_kind, label="RS"),
        PatternKeyPoint(time=candles[-1].time, value=target, kind=KeyPointKind.TARGET, label="T"),
    )

    dashed = LineStyle(line_style="dashed")
    visualization = PatternVisualization(
        key_points=key_points,
        lines=(
            PatternLine(from_index=0, to_index=1, role=LineRole.OUTLINE, style=dashed),
            PatternLine(from_index=1, to_index=2, role=LineRole.OUTLINE, style=dashed),
            PatternLine(from_index=2, to_index=3, role=LineRole.OUTLINE, style=dashed),
            PatternLine(from_index=3, to_index=4, role=LineRole.OUTLINE, style=dashed),
            PatternLine(
                from_index=1,
                to_index=3,
                role=LineRole.NECKLINE,
                style=LineStyle(color="#ff0000", line_width=2),
            ),
        ),
        areas=(
            PatternArea(
                points=(0, 1, 2, 3, 4),
                fill_color="#00ff00" if inverse else "#ff0000",
                opacity=0.1,
            ),
        ),
    )

    metrics = HeadAndShouldersMetrics(
        formation_period=right - left + 1,
        symmetry=1 - relative_difference(ls_price, rs_price),
        time_symmetry=validation.time_symmetry,
        breakout_level=neckline,
        target_level=target,
        stop_loss=head_price,
        neckline_level=neckline,
        left_shoulder_height=abs(ls_price - neckline),
        head_height=height,
        right_shoulder_height=abs(rs_price - neckline),
    )

    kind = PatternKind.INVERSE_HEAD_AND_SHOULDERS if inverse else PatternKind.HEAD_AND_SHOULDERS
    return PatternAnalysis(
        pattern_kind=kind,
        start_time=candles[left].time,
        end_time=candles[right].time,
        start_index=left,
        end_index=right,
        confidence=validation.confidence,
        visualization=visualization,
        metrics=metrics,
        directional_bias=kind.bias,
    )


def detect_head_and_shoulders(
    candles: Sequence[Candle],
    inverse: bool = False,
    radius: int = DEFAULT_RADIUS,
    policy: Optional[ConfidencePolicy] = None,
) -> list[PatternAnalysis]:
    """
    Detect Head and Shoulders patterns (regular or inverse).

    Returns:
        Up to three patterns, highest confidence first
    """
    if len(candles) < MIN_PATTERN_BARS:
        return []

    extremes = find_troughs(candles, radius) if inverse else find_peaks(candles, radius)
    if len(extremes) < 3:
        return []

    patterns = []
    evaluated = 0
    for left, head, right in combinations(extremes, 3):
        evaluated += 1
        validation = validate_head_and_shoulders(
            candles, left.index, head.index, right.index, inverse, policy
        )
        if validation.is_valid and validation.confidence >= MIN_CANDIDATE_CONFIDENCE:
            patterns.append(build_head_and_shoulders(
                candles, left.index, head.index, right.index, validation, inverse
            ))

    logger.debug(
        f"{'Inverse ' if inverse else ''}H&S: {len(extremes)} extrema, "
        f"{evaluated} candidates, {len(patterns)} accepted"
    )

    patterns.sort(key=lambda p: p.confidence, reverse=True)
    return patterns[:MAX_RESULTS]
