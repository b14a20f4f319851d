from __future__ import annotations

"""Shared plumbing for the individual checks."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional

from ..background import BackgroundTasks
from ..config.settings import NetwatchSettings
from ..evaluation.threshold import Evaluation, Severity, Threshold, ThresholdEvaluator, throttle_key
from ..metrics.provider import MetricProvider
from ..notify.dispatcher import AlertDispatcher
from ..notify.models import Alert
from ..service_manager import ServiceManager
from ..state.manifest_store import ManifestStore
from ..state.throttle_store import ThrottleStore

logger = logging.getLogger(__name__)


@dataclass
class CheckContext:
    """Everything a check needs, assembled once per invocation."""

    settings: NetwatchSettings
    throttle: ThrottleStore
    evaluator: ThresholdEvaluator
    manifest_store: ManifestStore
    provider: MetricProvider
    dispatcher: AlertDispatcher
    background: BackgroundTasks
    service_manager: Optional[ServiceManager] = None


class CheckStatus(Enum):
    SKIPPED = "skipped"
    OK = "ok"
    ALERTING = "alerting"
    FAILED = "failed"


@dataclass
class CheckResult:
    name: str
    status: CheckStatus
    findings: List[str] = field(default_factory=list)
    alerts_sent: int = 0
    error: Optional[str] = None


class Check(ABC):
    """
    One runnable check.

    ``run`` first asks the throttle store whether the scan interval has elapsed
    under ``scan_key``; only then is ``scan`` executed.
    """

    name: ClassVar[str]
    scan_key: ClassVar[str]

    def __init__(self, context: CheckContext) -> None:
        self.context = context
        self.settings = context.settings

    @property
    @abstractmethod
    def scan_interval(self) -> int:
        """Minimum seconds between two scans."""

    @abstractmethod
    async def scan(self) -> CheckResult:
        """Sample, evaluate and alert."""

    async def run(self) -> CheckResult:
        if not await self.should_run(self.scan_key, self.scan_interval):
            logger.debug("Check %s skipped; scanned less than %ds ago", self.name, self.scan_interval)
            return CheckResult(name=self.name, status=CheckStatus.SKIPPED)
        return await self.scan()

    async def should_run(self, key: str, interval: int) -> bool:
        return await asyncio.to_thread(self.context.throttle.should_run, key, interval)

    def send_alert(self, subject: str, body: str, severity: Severity, alert_type: str) -> None:
        self.context.dispatcher.dispatch(Alert(subject=subject, body=body, severity=severity, alert_type=alert_type))

    async def alert_if_due(self, key: str, interval: int, subject: str, body: str, severity: Severity = Severity.WARNING) -> bool:
        """Dispatch an aggregate alert when the ``key`` cool-down has expired."""
        if not await self.should_run(key, interval):
            logger.debug("Alert %s suppressed by throttle", key)
            return False
        self.send_alert(subject, body, severity, alert_type=key)
        return True


def format_percent(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


class ThresholdCheck(Check):
    """Base for checks that classify scalar percentages."""

    async def evaluate(self, resource: str, label: str, value: float, threshold: Threshold, evidence: str) -> Evaluation:
        evaluation = await asyncio.to_thread(self.context.evaluator.evaluate, resource, value, threshold)
        if evaluation.severity is Severity.OK:
            return evaluation

        shown = format_percent(value)
        log = logger.error if evaluation.severity is Severity.CRITICAL else logger.warning
        log("%s: %s usage reached %s%%", evaluation.severity.value, label.lower(), shown)
        if evaluation.notify:
            self.send_alert(
                f"{evaluation.severity.label}: {label} Usage {shown}%",
                evidence,
                evaluation.severity,
                alert_type=throttle_key(resource, evaluation.severity),
            )
        return evaluation


def result_from(name: str, evaluations: List[Evaluation], findings: List[str]) -> CheckResult:
    alerting = any(evaluation.severity is not Severity.OK for evaluation in evaluations)
    return CheckResult(
        name=name,
        status=CheckStatus.ALERTING if alerting else CheckStatus.OK,
        findings=findings,
        alerts_sent=sum(1 for evaluation in evaluations if evaluation.notify),
    )


__all__ = [
    "Check",
    "CheckContext",
    "CheckResult",
    "CheckStatus",
    "ThresholdCheck",
    "format_percent",
    "result_from",
]
