"""Typed errors raised at the detection boundary."""


class PatternDetectionError(ValueError):
    """Base class for caller-contract violations."""


class InvalidDetectionParams(PatternDetectionError):
    """Detection parameters are out of range or malformed."""


class InvalidCandleData(PatternDetectionError):
    """Candle input breaks the ascending-time or price invariants."""
