from __future__ import annotations

"""Two-tier threshold evaluation with independent re-notification cadences."""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..config.errors import ConfigurationError

if TYPE_CHECKING:
    from ..state.throttle_store import ThrottleStore

logger = logging.getLogger(__name__)

_MAX_PERCENT = 100


class Severity(Enum):
    """Sample classification levels."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Threshold:
    """Warning/critical percentages and the re-notification interval of each level."""

    warning_pct: int
    critical_pct: int
    warn_interval: int
    crit_interval: int
    resource: str = "resource"

    def __post_init__(self) -> None:
        for name, pct in (("warning_pct", self.warning_pct), ("critical_pct", self.critical_pct)):
            if not 0 <= pct <= _MAX_PERCENT:
                raise ConfigurationError.invalid_value(f"{self.resource} {name}", pct, "Percentages must be within 0-100")
        for name, interval in (("warn_interval", self.warn_interval), ("crit_interval", self.crit_interval)):
            if interval < 0:
                raise ConfigurationError.invalid_value(f"{self.resource} {name}", interval, "Intervals must be non-negative")
        if self.critical_pct < self.warning_pct:
            raise ConfigurationError.threshold_order(self.resource, self.warning_pct, self.critical_pct)

    def interval_for(self, severity: Severity) -> int:
        if severity is Severity.CRITICAL:
            return self.crit_interval
        if severity is Severity.WARNING:
            return self.warn_interval
        raise ValueError("OK samples have no notification interval")


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating one sample."""

    severity: Severity
    notify: bool


def classify(value: float, threshold: Threshold) -> Severity:
    """
    Classify a sample against a threshold.

    The value is truncated toward zero before comparing, so 74.99 against a
    warning level of 75 is still OK. Critical short-circuits warning.
    """
    whole = math.trunc(value)
    if whole >= threshold.critical_pct:
        return Severity.CRITICAL
    if whole >= threshold.warning_pct:
        return Severity.WARNING
    return Severity.OK


def throttle_key(resource: str, severity: Severity) -> str:
    """Return the timer key used for alerts of ``severity`` on ``resource``."""
    return f"{resource}_email_{severity.value}"


class ThresholdEvaluator:
    """Classifies samples and asks the throttle store whether an alert is due."""

    def __init__(self, throttle: "ThrottleStore") -> None:
        self._throttle = throttle

    def evaluate(self, resource: str, value: float, threshold: Threshold) -> Evaluation:
        severity = classify(value, threshold)
        if severity is Severity.OK:
            return Evaluation(severity=severity, notify=False)

        # Each level keeps its own timer so a warning cool-down never hides a critical alert.
        key = throttle_key(resource, severity)
        notify = self._throttle.should_run(key, threshold.interval_for(severity))
        if not notify:
            logger.debug("Alert %s suppressed by throttle", key)
        return Evaluation(severity=severity, notify=notify)


__all__ = [
    "Evaluation",
    "Severity",
    "Threshold",
    "ThresholdEvaluator",
    "classify",
    "throttle_key",
]
