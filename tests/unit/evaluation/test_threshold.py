"""Tests for evaluation.threshold module."""

from pathlib import Path

import pytest

from netwatch.config.errors import ConfigurationError
from netwatch.evaluation.threshold import Severity, Threshold, ThresholdEvaluator, classify, throttle_key
from netwatch.state.throttle_store import ThrottleStore

MEM = Threshold(warning_pct=75, critical_pct=90, warn_interval=86400, crit_interval=3600, resource="mem")


class TestClassify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.0, Severity.OK),
            (74.99, Severity.OK),
            (75.0, Severity.WARNING),
            (89.999, Severity.WARNING),
            (90.0, Severity.CRITICAL),
            (100.0, Severity.CRITICAL),
        ],
    )
    def test_truncates_before_comparing(self, value: float, expected: Severity) -> None:
        assert classify(value, MEM) is expected

    def test_severity_is_monotonic(self) -> None:
        order = [Severity.OK, Severity.WARNING, Severity.CRITICAL]
        ranks = [order.index(classify(value / 10, MEM)) for value in range(0, 1001)]

        assert ranks == sorted(ranks)

    def test_equal_levels_report_critical(self) -> None:
        threshold = Threshold(warning_pct=80, critical_pct=80, warn_interval=1, crit_interval=1)

        assert classify(80, threshold) is Severity.CRITICAL


class TestThresholdValidation:
    def test_rejects_critical_below_warning(self) -> None:
        with pytest.raises(ConfigurationError, match="CRITICAL_CPU=70 must not be lower than WARNING_CPU=80"):
            Threshold(warning_pct=80, critical_pct=70, warn_interval=1, crit_interval=1, resource="cpu")

    def test_rejects_out_of_range_percent(self) -> None:
        with pytest.raises(ConfigurationError):
            Threshold(warning_pct=75, critical_pct=101, warn_interval=1, crit_interval=1)

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ConfigurationError):
            Threshold(warning_pct=75, critical_pct=90, warn_interval=-1, crit_interval=1)

    def test_interval_for_ok_is_an_error(self) -> None:
        with pytest.raises(ValueError):
            MEM.interval_for(Severity.OK)


def test_throttle_key_format() -> None:
    assert throttle_key("disk", Severity.CRITICAL) == "disk_email_critical"


class TestThresholdEvaluator:
    @pytest.fixture
    def now(self) -> list:
        return [0.0]

    @pytest.fixture
    def evaluator(self, tmp_path: Path, now: list) -> ThresholdEvaluator:
        return ThresholdEvaluator(ThrottleStore(tmp_path, clock=lambda: now[0]))

    def test_ok_never_notifies(self, evaluator: ThresholdEvaluator, tmp_path: Path) -> None:
        evaluation = evaluator.evaluate("mem", 10.0, MEM)

        assert evaluation.severity is Severity.OK
        assert evaluation.notify is False
        assert list(tmp_path.glob("*.time")) == []

    def test_critical_and_warning_are_throttled_separately(self, evaluator: ThresholdEvaluator, now: list) -> None:
        assert evaluator.evaluate("mem", 80.0, MEM).notify is True
        assert evaluator.evaluate("mem", 95.0, MEM).notify is True

        now[0] = 10.0
        assert evaluator.evaluate("mem", 95.0, MEM).notify is False
        assert evaluator.evaluate("mem", 80.0, MEM).notify is False

        now[0] = 3601.0
        assert evaluator.evaluate("mem", 95.0, MEM).notify is True
        assert evaluator.evaluate("mem", 80.0, MEM).notify is False
