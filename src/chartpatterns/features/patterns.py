"""
Chart pattern detection facade.

Runs every requested pattern family over the trailing lookback window of a
candle sequence and returns the detections that clear the confidence floor.
Each call is a pure function of its inputs.
"""

from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import ValidationError

from chartpatterns.config import Settings, get_logger, get_settings
from chartpatterns.core.errors import InvalidCandleData, InvalidDetectionParams
from chartpatterns.core.models import Candle, DetectionParams, PatternAnalysis, PatternKind
from chartpatterns.features.double_patterns import detect_double_pattern
from chartpatterns.features.head_and_shoulders import detect_head_and_shoulders
from chartpatterns.features.scoring import ConfidencePolicy, DefaultConfidencePolicy
from chartpatterns.features.triangles import detect_triangle

logger = get_logger("features.patterns")

CandleInput = Union[Candle, Mapping[str, Any]]
ParamsInput = Union[DetectionParams, Mapping[str, Any], None]

FamilyRunner = Callable[[Sequence[Candle], int, ConfidencePolicy], list[PatternAnalysis]]


def _runner(func: Callable[..., list[PatternAnalysis]], **kwargs) -> FamilyRunner:
    bound = partial(func, **kwargs)
    return lambda candles, radius, policy: bound(candles, radius=radius, policy=policy)


_FAMILY_RUNNERS: dict[PatternKind, FamilyRunner] = {
    PatternKind.HEAD_AND_SHOULDERS: _runner(detect_head_and_shoulders, inverse=False),
    PatternKind.INVERSE_HEAD_AND_SHOULDERS: _runner(detect_head_and_shoulders, inverse=True),
    PatternKind.ASCENDING_TRIANGLE: _runner(detect_triangle, kind=PatternKind.ASCENDING_TRIANGLE),
    PatternKind.DESCENDING_TRIANGLE: _runner(detect_triangle, kind=PatternKind.DESCENDING_TRIANGLE),
    PatternKind.SYMMETRICAL_TRIANGLE: _runner(detect_triangle, kind=PatternKind.SYMMETRICAL_TRIANGLE),
    PatternKind.DOUBLE_TOP: _runner(detect_double_pattern, kind="top"),
    PatternKind.DOUBLE_BOTTOM: _runner(detect_double_pattern, kind="bottom"),
}


# =============================================================================
# INPUT VALIDATION
# =============================================================================


def validate_candles(candles: Iterable[CandleInput]) -> list[Candle]:
    """
    Coerce raw records to Candles and enforce the ascending-time invariant.

    Raises:
        InvalidCandleData: On malformed records, NaN or negative prices,
            high below low, or non-increasing timestamps
    """
    validated: list[Candle] = []
    for i, raw in enumerate(candles):
        if isinstance(raw, Candle):
            validated.append(raw)
            continue
        try:
            validated.append(Candle.model_validate(raw))
        except ValidationError as e:
            raise InvalidCandleData(f"Candle {i} is malformed: {e}") from e

    for i in range(1, len(validated)):
        if validated[i].time <= validated[i - 1].time:
            raise InvalidCandleData(
                f"Candle times must be strictly ascending: "
                f"candle {i} at {validated[i].time} follows {validated[i - 1].time}"
            )

    return validated


def validate_params(
    params: ParamsInput = None,
    settings: Optional[Settings] = None,
    **overrides,
) -> DetectionParams:
    """
    Resolve detection parameters, falling back to settings defaults.

    Raises:
        InvalidDetectionParams: When a value is out of range or a key is unknown
    """
    try:
        if isinstance(params, DetectionParams):
            if not overrides:
                return params
            return DetectionParams.model_validate({**params.model_dump(), **overrides})
        values = dict(params or {})
        values.update(overrides)
        return DetectionParams.from_settings(settings, **values)
    except ValidationError as e:
        raise InvalidDetectionParams(f"Invalid detection parameters: {e}") from e


def candles_from_dataframe(df: pd.DataFrame) -> list[Candle]:
    """
    Convert an OHLCV DataFrame to Candles.

    Args:
        df: DataFrame with open/high/low/close (and optionally volume) columns,
            indexed by datetime or carrying a ``time`` column in epoch seconds

    Returns:
        Validated, time-ascending candles
    """
    frame = df.copy()
    frame.columns = frame.columns.astype(str).str.lower().str.strip()

    missing = [c for c in ("open", "high", "low", "close") if c not in frame.columns]
    if missing:
        raise InvalidCandleData(f"Missing required column(s): {', '.join(missing)}")

    if "time" in frame.columns:
        times = frame["time"].astype(float).tolist()
    elif isinstance(frame.index, pd.DatetimeIndex):
        epoch = pd.Timestamp("1970-01-01", tz=frame.index.tz)
        times = (frame.index - epoch).total_seconds().tolist()
    else:
        raise InvalidCandleData("DataFrame needs a DatetimeIndex or a 'time' column")

    volume = frame["volume"].astype(float).tolist() if "volume" in frame.columns else [0.0] * len(frame)

    records = [
        {"time": t, "open": o, "high": h, "low": l, "close": c, "volume": v}
        for t, o, h, l, c, v in zip(
            times,
            frame["open"].astype(float).tolist(),
            frame["high"].astype(float).tolist(),
            frame["low"].astype(float).tolist(),
            frame["close"].astype(float).tolist(),
            volume,
        )
    ]
    return validate_candles(records)


# =============================================================================
# MASTER PATTERN DETECTOR
# =============================================================================


class PatternDetector:
    """
    Orchestrates all pattern families over a lookback window.

    Families are isolated: an error raised while evaluating one is logged
    and that family contributes nothing, the rest still run.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        policy: Optional[ConfidencePolicy] = None,
    ):
        self.settings = settings or get_settings()
        self.policy = policy or DefaultConfidencePolicy()
        self.radius = self.settings.EXTREMA_RADIUS

    def detect(
        self,
        candles: Iterable[CandleInput],
        params: ParamsInput = None,
        **overrides,
    ) -> list[PatternAnalysis]:
        """
        Detect chart patterns in the trailing window of ``candles``.

        Args:
            candles: Time-ascending Candles (or mappings with the same fields)
            params: DetectionParams, a mapping of its fields, or None for defaults
            **overrides: Individual DetectionParams fields

        Returns:
            Detections grouped by kind, each group highest confidence first.
            Indices refer to positions within the lookback window.
        """
        resolved = validate_params(params, self.settings, **overrides)
        series = validate_candles(candles)
        window = series[-resolved.lookback_period:]

        results: list[PatternAnalysis] = []
        for kind, runner in _FAMILY_RUNNERS.items():
            if not resolved.wants(kind):
                continue
            try:
                found = runner(window, self.radius, self.policy)
            except Exception as e:
                logger.exception(f"{kind.value} detection failed: {e}")
                continue
            results.extend(p for p in found if p.confidence >= resolved.min_confidence)

        logger.info(
            f"Detected {len(results)} pattern(s) in {len(window)} candles "
            f"(min_confidence={resolved.min_confidence})"
        )
        return results


def detect_patterns(
    candles: Iterable[CandleInput],
    params: ParamsInput = None,
    **overrides,
) -> list[PatternAnalysis]:
    """Run a default PatternDetector once."""
    return PatternDetector().detect(candles, params, **overrides)


# =============================================================================
# PATTERNS CONFIG REGISTRY
# =============================================================================


_CATALOG = (
    ("Head and Shoulders", PatternKind.HEAD_AND_SHOULDERS, "reversal",
     "Three peaks with a higher middle peak above a neckline"),
    ("Inverse Head and Shoulders", PatternKind.INVERSE_HEAD_AND_SHOULDERS, "reversal",
     "Three troughs with a lower middle trough below a neckline"),
    ("Ascending Triangle", PatternKind.ASCENDING_TRIANGLE, "continuation",
     "Flat resistance with rising support"),
    ("Descending Triangle", PatternKind.DESCENDING_TRIANGLE, "continuation",
     "Falling resistance with flat support"),
    ("Symmetrical Triangle", PatternKind.SYMMETRICAL_TRIANGLE, "continuation",
     "Converging from both sides, breakout direction unclear"),
    ("Double Top", PatternKind.DOUBLE_TOP, "reversal",
     "Two peaks at similar levels indicating resistance"),
    ("Double Bottom", PatternKind.DOUBLE_BOTTOM, "reversal",
     "Two troughs at similar levels indicating support"),
)

# Direction comes from PatternKind.bias, the same value detections carry
PATTERNS_CONFIG: dict[str, dict] = {
    name: {
        "kind": kind,
        "family": kind.family.value,
        "direction": kind.bias.value,
        "category": category,
        "desc": desc,
    }
    for name, kind, category, desc in _CATALOG
}
