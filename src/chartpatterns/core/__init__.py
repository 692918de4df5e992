"""Core module exports."""

from .errors import InvalidCandleData, InvalidDetectionParams, PatternDetectionError
from .models import (
    Candle,
    DetectionParams,
    DirectionalBias,
    DoublePatternMetrics,
    ExtremumPoint,
    HeadAndShouldersMetrics,
    KeyPointKind,
    LineRole,
    LineStyle,
    PatternAnalysis,
    PatternArea,
    PatternFamily,
    PatternKeyPoint,
    PatternKind,
    PatternLine,
    PatternMetrics,
    PatternVisualization,
    TriangleMetrics,
)

__all__ = [
    "Candle",
    "ExtremumPoint",
    "PatternFamily",
    "PatternKind",
    "DirectionalBias",
    "KeyPointKind",
    "LineRole",
    "LineStyle",
    "PatternKeyPoint",
    "PatternLine",
    "PatternArea",
    "PatternVisualization",
    "HeadAndShouldersMetrics",
    "TriangleMetrics",
    "DoublePatternMetrics",
    "PatternMetrics",
    "PatternAnalysis",
    "DetectionParams",
    "PatternDetectionError",
    "InvalidDetectionParams",
    "InvalidCandleData",
]
