from __future__ import annotations

"""Per-device disk usage check with aggregate alerting."""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..evaluation.threshold import Severity, classify, throttle_key
from ..metrics.models import DiskUsage
from .base import CheckResult, CheckStatus, ThresholdCheck, format_percent
from .evidence import disk_report

logger = logging.getLogger(__name__)

_TEMPORARY_MARKER = "tmp"


def is_monitored(disk: DiskUsage) -> bool:
    """Only real block devices count; anything mentioning ``tmp`` (tmpfs, devtmpfs, /tmp) is ignored."""
    if not disk.device.startswith("/dev/"):
        return False
    return not any(_TEMPORARY_MARKER in field for field in (disk.device, disk.mountpoint, disk.fstype))


class DiskCheck(ThresholdCheck):
    name = "disk"
    scan_key = "disk_usage"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.disk

    async def scan(self) -> CheckResult:
        disks = await asyncio.to_thread(self.context.provider.disks)
        monitored = [disk for disk in disks if is_monitored(disk)]

        first_critical: Optional[DiskUsage] = None
        first_warning: Optional[DiskUsage] = None
        findings: List[str] = []
        for disk in monitored:
            severity = classify(disk.percent, self.settings.disk)
            if severity is Severity.OK:
                continue
            shown = format_percent(disk.percent)
            findings.append(f"{disk.device} {shown}%")
            if severity is Severity.CRITICAL:
                logger.error("critical: disk usage reached %s%% on %s", shown, disk.device)
                first_critical = first_critical or disk
            else:
                logger.warning("warning: disk usage reached %s%% on %s", shown, disk.device)
                first_warning = first_warning or disk

        framing = first_critical or first_warning
        if framing is None:
            return CheckResult(name=self.name, status=CheckStatus.OK, findings=findings)

        evaluation = await asyncio.to_thread(self.context.evaluator.evaluate, "disk", framing.percent, self.settings.disk)
        if evaluation.notify:
            self.send_alert(
                f"{evaluation.severity.label}: Disk Usage {format_percent(framing.percent)}% on {framing.device}",
                disk_report(_report_rows(disks)),
                evaluation.severity,
                alert_type=throttle_key("disk", evaluation.severity),
            )
        return CheckResult(
            name=self.name,
            status=CheckStatus.ALERTING,
            findings=findings,
            alerts_sent=1 if evaluation.notify else 0,
        )


def _report_rows(disks: Sequence[DiskUsage]) -> List[DiskUsage]:
    return [disk for disk in disks if disk.device.startswith("/dev/")]
