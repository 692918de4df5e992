"""
Confidence scoring policies.

Scores are heuristic linear blends, not calibrated probabilities. The default
policy keeps the established constants; alternative policies can be passed to
the detector to re-weight families without touching validation rules.
"""

from abc import ABC, abstractmethod

from chartpatterns.core.models import PatternKind


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Bound a score to [low, high]."""
    return max(low, min(high, value))


class ConfidencePolicy(ABC):
    """Turns validated geometric measurements into a confidence in [0, 1]."""

    @abstractmethod
    def head_and_shoulders(
        self,
        shoulder_diff: float,
        neckline_diff: float,
        time_symmetry: float,
    ) -> float:
        ...

    @abstractmethod
    def triangle(self, kind: PatternKind, high_slope: float, low_slope: float) -> float:
        ...

    @abstractmethod
    def double_pattern(self, price_diff: float) -> float:
        ...


class DefaultConfidencePolicy(ConfidencePolicy):
    """Base 0.7 plus per-family quality bonuses."""

    base: float = 0.7
    head_and_shoulders_cap: float = 0.95

    def head_and_shoulders(
        self,
        shoulder_diff: float,
        neckline_diff: float,
        time_symmetry: float,
    ) -> float:
        confidence = self.base
        confidence += min(0.15, (1 - shoulder_diff * 10) * 0.15)
        confidence += min(0.15, (1 - neckline_diff * 20) * 0.15)
        confidence += time_symmetry * 0.10
        return clamp(confidence, high=self.head_and_shoulders_cap)

    def triangle(self, kind: PatternKind, high_slope: float, low_slope: float) -> float:
        if kind == PatternKind.ASCENDING_TRIANGLE:
            bonus = (1 - abs(high_slope) * 100) * 0.15
        elif kind == PatternKind.DESCENDING_TRIANGLE:
            bonus = (1 - abs(low_slope) * 100) * 0.15
        elif kind == PatternKind.SYMMETRICAL_TRIANGLE:
            if low_slope == 0:
                return 0.0
            convergence = abs(high_slope) / abs(low_slope)
            bonus = (1 - abs(1 - convergence)) * 0.15
        else:
            raise ValueError(f"Not a triangle kind: {kind}")
        return clamp(self.base + bonus)

    def double_pattern(self, price_diff: float) -> float:
        return clamp(self.base + 0.3 * (1 - price_diff))
