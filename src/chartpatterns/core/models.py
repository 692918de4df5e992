"""Core domain models using Pydantic."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from chartpatterns.config import Settings, get_settings


class PatternFamily(str, Enum):
    """Detector families; each owns one metrics payload."""
    HEAD_AND_SHOULDERS = "head_and_shoulders"
    TRIANGLE = "triangle"
    DOUBLE_PATTERN = "double_pattern"


class PatternKind(str, Enum):
    """Detectable chart patterns."""
    HEAD_AND_SHOULDERS = "headAndShoulders"
    INVERSE_HEAD_AND_SHOULDERS = "inverseHeadAndShoulders"
    ASCENDING_TRIANGLE = "ascendingTriangle"
    DESCENDING_TRIANGLE = "descendingTriangle"
    SYMMETRICAL_TRIANGLE = "symmetricalTriangle"
    DOUBLE_TOP = "doubleTop"
    DOUBLE_BOTTOM = "doubleBottom"

    @property
    def family(self) -> PatternFamily:
        return _KIND_FAMILY[self]

    @property
    def bias(self) -> "DirectionalBias":
        """Signal direction a completed pattern of this kind implies."""
        return _KIND_BIAS[self]


_KIND_FAMILY = {
    PatternKind.HEAD_AND_SHOULDERS: PatternFamily.HEAD_AND_SHOULDERS,
    PatternKind.INVERSE_HEAD_AND_SHOULDERS: PatternFamily.HEAD_AND_SHOULDERS,
    PatternKind.ASCENDING_TRIANGLE: PatternFamily.TRIANGLE,
    PatternKind.DESCENDING_TRIANGLE: PatternFamily.TRIANGLE,
    PatternKind.SYMMETRICAL_TRIANGLE: PatternFamily.TRIANGLE,
    PatternKind.DOUBLE_TOP: PatternFamily.DOUBLE_PATTERN,
    PatternKind.DOUBLE_BOTTOM: PatternFamily.DOUBLE_PATTERN,
}


class DirectionalBias(str, Enum):
    """Pattern signal direction."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


_KIND_BIAS = {
    PatternKind.HEAD_AND_SHOULDERS: DirectionalBias.BEARISH,
    PatternKind.INVERSE_HEAD_AND_SHOULDERS: DirectionalBias.BULLISH,
    PatternKind.ASCENDING_TRIANGLE: DirectionalBias.BULLISH,
    PatternKind.DESCENDING_TRIANGLE: DirectionalBias.BEARISH,
    PatternKind.SYMMETRICAL_TRIANGLE: DirectionalBias.NEUTRAL,
    PatternKind.DOUBLE_TOP: DirectionalBias.BEARISH,
    PatternKind.DOUBLE_BOTTOM: DirectionalBias.BULLISH,
}


class KeyPointKind(str, Enum):
    """Role of an annotated vertex."""
    PEAK = "peak"
    TROUGH = "trough"
    TARGET = "target"


class LineRole(str, Enum):
    """What a visualization line represents."""
    OUTLINE = "outline"
    NECKLINE = "neckline"
    RESISTANCE = "resistance"
    SUPPORT = "support"


# =============================================================================
# Market Data Models
# =============================================================================


class Candle(BaseModel):
    """Single OHLCV candle; time is in epoch seconds."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    time: float
    open: float = Field(ge=0)
    high: float = Field(ge=0)
    low: float = Field(ge=0)
    close: float = Field(ge=0)
    volume: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) is below low ({self.low})")
        return self


class ExtremumPoint(BaseModel):
    """A peak (from high) or trough (from low) at a candle index."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    value: float


# =============================================================================
# Visualization Models
# =============================================================================


class PatternKeyPoint(BaseModel):
    """Annotated vertex of a detected pattern."""

    model_config = ConfigDict(frozen=True)

    time: float
    value: float
    kind: KeyPointKind
    label: str


class LineStyle(BaseModel):
    """Rendering hints for a pattern line."""

    model_config = ConfigDict(frozen=True)

    color: Optional[str] = None
    line_width: Optional[int] = None
    line_style: Literal["solid", "dashed"] = "solid"


class PatternLine(BaseModel):
    """Segment between two key points, referenced by position."""

    model_config = ConfigDict(frozen=True)

    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)
    role: LineRole
    style: LineStyle = Field(default_factory=LineStyle)


class PatternArea(BaseModel):
    """Shaded polygon over a set of key points."""

    model_config = ConfigDict(frozen=True)

    points: tuple[int, ...]
    fill_color: str
    opacity: float = Field(default=0.1, ge=0.0, le=1.0)


class PatternVisualization(BaseModel):
    """Drawing skeleton handed to the chart renderer."""

    model_config = ConfigDict(frozen=True)

    key_points: tuple[PatternKeyPoint, ...]
    lines: tuple[PatternLine, ...] = ()
    areas: tuple[PatternArea, ...] = ()

    @field_validator("key_points")
    @classmethod
    def _check_time_order(cls, v: tuple[PatternKeyPoint, ...]) -> tuple[PatternKeyPoint, ...]:
        for prev, cur in zip(v, v[1:]):
            if cur.time <= prev.time:
                raise ValueError("key points must be strictly time-ascending")
        return v

    @model_validator(mode="after")
    def _check_references(self) -> "PatternVisualization":
        n = len(self.key_points)
        for line in self.lines:
            if line.from_index >= n or line.to_index >= n:
                raise ValueError(f"line references a missing key point ({n} available)")
        for area in self.areas:
            if any(p >= n for p in area.points):
                raise ValueError(f"area references a missing key point ({n} available)")
        return self


# =============================================================================
# Pattern Metrics (tagged by family)
# =============================================================================


class HeadAndShouldersMetrics(BaseModel):
    """Metrics for regular and inverse head-and-shoulders."""

    model_config = ConfigDict(frozen=True)

    family: Literal["head_and_shoulders"] = "head_and_shoulders"
    formation_period: int
    symmetry: float
    time_symmetry: float
    breakout_level: float
    target_level: float
    stop_loss: float
    neckline_level: float
    left_shoulder_height: float
    head_height: float
    right_shoulder_height: float


class TriangleMetrics(BaseModel):
    """Metrics for ascending, descending and symmetrical triangles."""

    model_config = ConfigDict(frozen=True)

    family: Literal["triangle"] = "triangle"
    formation_period: int
    breakout_level: float
    # None for symmetrical triangles, whose breakout side is undecided
    target_level: Optional[float] = None
    stop_loss: Optional[float] = None
    upper_bound: float
    lower_bound: float
    upper_slope: float
    lower_slope: float
    lookback: int


class DoublePatternMetrics(BaseModel):
    """Metrics for double tops and bottoms."""

    model_config = ConfigDict(frozen=True)

    family: Literal["double_pattern"] = "double_pattern"
    formation_period: int
    symmetry: float
    breakout_level: float
    target_level: float
    stop_loss: float
    first_peak_price: float
    second_peak_price: float
    valley_price: float


PatternMetrics = Annotated[
    Union[HeadAndShouldersMetrics, TriangleMetrics, DoublePatternMetrics],
    Field(discriminator="family"),
]


# =============================================================================
# Detection Models
# =============================================================================


class PatternAnalysis(BaseModel):
    """A detected chart pattern with its drawing skeleton and trade levels."""

    model_config = ConfigDict(frozen=True)

    pattern_kind: PatternKind
    start_time: float
    end_time: float
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    confidence: float = Field(ge=0.0, le=1.0)
    visualization: PatternVisualization
    metrics: PatternMetrics
    directional_bias: DirectionalBias

    @model_validator(mode="after")
    def _check_consistency(self) -> "PatternAnalysis":
        if self.start_index >= self.end_index:
            raise ValueError(
                f"start_index ({self.start_index}) must precede end_index ({self.end_index})"
            )
        if self.metrics.family != self.pattern_kind.family.value:
            raise ValueError(
                f"{self.metrics.family} metrics do not belong to {self.pattern_kind.value}"
            )
        return self


class DetectionParams(BaseModel):
    """Parameters for a single detection run."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False, extra="forbid")

    lookback_period: int = Field(default=60, gt=0, strict=True)
    min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    pattern_kinds: Optional[frozenset[PatternKind]] = None

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, **overrides
    ) -> "DetectionParams":
        """Build params from library settings, with explicit overrides on top."""
        settings = settings or get_settings()
        values = {
            "lookback_period": settings.DEFAULT_LOOKBACK_PERIOD,
            "min_confidence": settings.DEFAULT_MIN_CONFIDENCE,
        }
        values.update(overrides)
        return cls.model_validate(values)

    def wants(self, kind: PatternKind) -> bool:
        """Whether this run should detect the given kind."""
        return self.pattern_kinds is None or kind in self.pattern_kinds
