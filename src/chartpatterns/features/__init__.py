"""
Chart pattern detection.

Provides:
- Local extrema (peaks/troughs) and least-squares trend lines
- Head and Shoulders (regular and inverse)
- Ascending, descending and symmetrical triangles
- Double Top and Double Bottom
- PatternDetector facade with confidence filtering
"""

from .double_patterns import (
    build_double_pattern,
    detect_double_pattern,
    validate_double_pattern,
)
from .extrema import find_extreme_between, find_peaks, find_troughs
from .head_and_shoulders import (
    build_head_and_shoulders,
    detect_head_and_shoulders,
    validate_head_and_shoulders,
)
from .patterns import (
    PATTERNS_CONFIG,
    PatternDetector,
    candles_from_dataframe,
    detect_patterns,
    validate_candles,
    validate_params,
)
from .scoring import ConfidencePolicy, DefaultConfidencePolicy
from .trendline import TrendLine, fit_trend_line
from .triangles import build_triangle, classify_triangle, detect_triangle, validate_triangle

__all__ = [
    # Extrema and trend lines
    "find_peaks",
    "find_troughs",
    "find_extreme_between",
    "TrendLine",
    "fit_trend_line",
    # Scoring
    "ConfidencePolicy",
    "DefaultConfidencePolicy",
    # Families
    "validate_head_and_shoulders",
    "build_head_and_shoulders",
    "detect_head_and_shoulders",
    "classify_triangle",
    "validate_triangle",
    "build_triangle",
    "detect_triangle",
    "validate_double_pattern",
    "build_double_pattern",
    "detect_double_pattern",
    # Facade
    "PatternDetector",
    "detect_patterns",
    "validate_candles",
    "validate_params",
    "candles_from_dataframe",
    "PATTERNS_CONFIG",
]
