"""Unit tests for head and shoulders detection."""

import pytest

from chartpatterns.core import DirectionalBias, KeyPointKind, LineRole, PatternKind
from chartpatterns.features.head_and_shoulders import (
    HeadAndShouldersValidation,
    build_head_and_shoulders,
    detect_head_and_shoulders,
    validate_head_and_shoulders,
)
from chartpatterns.features.scoring import DefaultConfidencePolicy

from conftest import zigzag_candles


def _shoulders_candles(right_shoulder_mid: float, right_valley_mid: float = 95.5):
    return zigzag_candles([
        (0, 90.0),
        (20, 99.5),
        (35, 95.5),
        (50, 109.5),
        (65, right_valley_mid),
        (80, right_shoulder_mid),
        (99, 85.0),
    ])


class TestValidation:
    """Test the geometric rules."""

    def test_classic_candidate_is_valid(self, head_and_shoulders_candles):
        validation = validate_head_and_shoulders(head_and_shoulders_candles, 20, 50, 80)

        assert validation.is_valid
        assert validation.neckline_indices == (35, 65)
        assert validation.shoulder_diff == pytest.approx(0.0)
        assert validation.neckline_diff == pytest.approx(0.0)
        assert validation.time_symmetry == pytest.approx(1.0)
        assert validation.confidence == pytest.approx(0.95)

    def test_shoulders_three_and_a_half_percent_apart_are_rejected(self):
        """Right shoulder high 103.5 vs left 100 breaks the 3% rule."""
        candles = _shoulders_candles(right_shoulder_mid=103.0)

        validation = validate_head_and_shoulders(candles, 20, 50, 80)

        assert validation.is_valid is False
        assert detect_head_and_shoulders(candles) == []

    def test_shoulders_within_three_percent_are_accepted(self):
        candles = _shoulders_candles(right_shoulder_mid=102.0)

        validation = validate_head_and_shoulders(candles, 20, 50, 80)

        assert validation.is_valid
        assert validation.shoulder_diff == pytest.approx(0.025)
        assert validation.shoulder_diff <= 0.03

    def test_head_must_exceed_shoulders(self, head_and_shoulders_candles):
        """Swapping roles so a shoulder plays the head fails rule 1."""
        assert not validate_head_and_shoulders(head_and_shoulders_candles, 20, 35, 50).is_valid
        assert not validate_head_and_shoulders(head_and_shoulders_candles, 50, 65, 80).is_valid

    def test_indices_must_be_ordered(self, head_and_shoulders_candles):
        assert not validate_head_and_shoulders(head_and_shoulders_candles, 80, 50, 20).is_valid

    def test_tilted_neckline_lowers_confidence_without_rejecting(self):
        """A 20% neckline tilt is still valid but scores below the 0.6 floor."""
        candles = _shoulders_candles(right_shoulder_mid=99.5, right_valley_mid=76.5)

        validation = validate_head_and_shoulders(candles, 20, 50, 80)

        assert validation.is_valid
        assert validation.neckline_diff == pytest.approx(0.2)
        assert validation.confidence == pytest.approx(0.5)
        assert detect_head_and_shoulders(candles) == []

    def test_time_asymmetry_reduces_confidence(self):
        """Uneven spans and a tilted neckline pull the score under the cap."""
        candles = zigzag_candles([
            (0, 90.0),
            (10, 99.5),
            (25, 95.5),
            (50, 109.5),
            (65, 86.0),
            (80, 99.5),
            (99, 85.0),
        ])

        validation = validate_head_and_shoulders(candles, 10, 50, 80)

        assert validation.is_valid
        assert validation.time_symmetry == pytest.approx(0.75)
        assert validation.neckline_diff == pytest.approx(0.1)
        expected = 0.7 + 0.15 + (1 - 0.1 * 20) * 0.15 + 0.75 * 0.10
        assert validation.confidence == pytest.approx(expected)
        assert validation.confidence < 0.95

    def test_inverse_candidate_is_valid(self, inverse_head_and_shoulders_candles):
        validation = validate_head_and_shoulders(
            inverse_head_and_shoulders_candles, 20, 50, 80, inverse=True
        )

        assert validation.is_valid
        assert validation.neckline_indices == (35, 65)


class TestBuilder:
    """Test the output record."""

    def test_build_regular_pattern(self, head_and_shoulders_candles):
        candles = head_and_shoulders_candles
        validation = validate_head_and_shoulders(candles, 20, 50, 80)

        pattern = build_head_and_shoulders(candles, 20, 50, 80, validation)

        assert pattern.pattern_kind == PatternKind.HEAD_AND_SHOULDERS
        assert pattern.directional_bias == DirectionalBias.BEARISH
        assert pattern.start_index == 20
        assert pattern.end_index == 80
        assert pattern.start_time == candles[20].time
        assert pattern.end_time == candles[80].time

        labels = [kp.label for kp in pattern.visualization.key_points]
        assert labels == ["LS", "LV", "H", "RV", "RS", "T"]
        assert pattern.visualization.key_points[-1].kind == KeyPointKind.TARGET
        assert pattern.visualization.key_points[-1].time == candles[-1].time

        roles = [line.role for line in pattern.visualization.lines]
        assert roles.count(LineRole.OUTLINE) == 4
        assert roles.count(LineRole.NECKLINE) == 1

        m = pattern.metrics
        assert m.neckline_level == pytest.approx(95.0)
        assert m.breakout_level == pytest.approx(95.0)
        assert m.target_level == pytest.approx(80.0)
        assert m.stop_loss == pytest.approx(110.0)
        assert m.head_height == pytest.approx(15.0)
        assert m.left_shoulder_height == pytest.approx(5.0)
        assert m.right_shoulder_height == pytest.approx(5.0)
        assert m.formation_period == 61
        assert m.symmetry == pytest.approx(1.0)

    def test_build_inverse_pattern(self, inverse_head_and_shoulders_candles):
        candles = inverse_head_and_shoulders_candles
        validation = validate_head_and_shoulders(candles, 20, 50, 80, inverse=True)

        pattern = build_head_and_shoulders(candles, 20, 50, 80, validation, inverse=True)

        assert pattern.pattern_kind == PatternKind.INVERSE_HEAD_AND_SHOULDERS
        assert pattern.directional_bias == DirectionalBias.BULLISH
        assert pattern.visualization.key_points[0].kind == KeyPointKind.TROUGH
        assert pattern.visualization.key_points[1].kind == KeyPointKind.PEAK
        assert pattern.metrics.neckline_level == pytest.approx(105.0)
        assert pattern.metrics.target_level == pytest.approx(120.0)
        assert pattern.metrics.stop_loss == pytest.approx(90.0)

    def test_rejected_candidate_cannot_be_built(self, head_and_shoulders_candles):
        with pytest.raises(ValueError):
            build_head_and_shoulders(
                head_and_shoulders_candles, 20, 50, 80,
                HeadAndShouldersValidation(is_valid=False),
            )


class TestDetection:
    """Test the full family scan."""

    def test_detects_single_regular_pattern(self, head_and_shoulders_candles):
        patterns = detect_head_and_shoulders(head_and_shoulders_candles)

        assert len(patterns) == 1
        assert patterns[0].metrics.target_level == pytest.approx(80.0)

    def test_regular_scan_ignores_inverse_shape(self, inverse_head_and_shoulders_candles):
        assert detect_head_and_shoulders(inverse_head_and_shoulders_candles) == []

    def test_detects_inverse_pattern(self, inverse_head_and_shoulders_candles):
        patterns = detect_head_and_shoulders(inverse_head_and_shoulders_candles, inverse=True)

        assert len(patterns) == 1
        assert patterns[0].directional_bias == DirectionalBias.BULLISH

    def test_too_few_candles(self, head_and_shoulders_candles):
        assert detect_head_and_shoulders(head_and_shoulders_candles[:14]) == []

    def test_results_are_capped_and_sorted(self, random_walk_candles):
        patterns = detect_head_and_shoulders(random_walk_candles, radius=2)

        assert len(patterns) <= 3
        confidences = [p.confidence for p in patterns]
        assert confidences == sorted(confidences, reverse=True)
        for p in patterns:
            assert 0.6 <= p.confidence <= 0.95

    def test_custom_policy_is_used(self, head_and_shoulders_candles):
        class FlatPolicy(DefaultConfidencePolicy):
            def head_and_shoulders(self, shoulder_diff, neckline_diff, time_symmetry):
                return 0.65

        patterns = detect_head_and_shoulders(head_and_shoulders_candles, policy=FlatPolicy())

        assert [p.confidence for p in patterns] == [0.65]
