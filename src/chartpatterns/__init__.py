"""Geometric chart pattern detection for OHLCV candle windows."""

from chartpatterns.core import (
    Candle,
    DetectionParams,
    DirectionalBias,
    InvalidCandleData,
    InvalidDetectionParams,
    PatternAnalysis,
    PatternDetectionError,
    PatternKind,
)
from chartpatterns.features import PatternDetector, candles_from_dataframe, detect_patterns

__all__ = [
    "Candle",
    "DetectionParams",
    "DirectionalBias",
    "PatternAnalysis",
    "PatternKind",
    "PatternDetector",
    "detect_patterns",
    "candles_from_dataframe",
    "PatternDetectionError",
    "InvalidDetectionParams",
    "InvalidCandleData",
]
