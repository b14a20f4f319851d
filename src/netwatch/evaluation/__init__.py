"""Threshold classification and per-severity notification decisions."""

from .threshold import Evaluation, Severity, Threshold, ThresholdEvaluator, classify, throttle_key

__all__ = [
    "Evaluation",
    "Severity",
    "Threshold",
    "ThresholdEvaluator",
    "classify",
    "throttle_key",
]
