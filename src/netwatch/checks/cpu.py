from __future__ import annotations

"""CPU usage check."""

import asyncio
from typing import Sequence

from ..evaluation.threshold import Severity, classify
from .base import CheckResult, CheckStatus, ThresholdCheck, format_percent, result_from
from .evidence import cpu_report


def average_busy(per_core: Sequence[float]) -> float:
    """Mean of the per-core busy percentages; 0 when no core reported."""
    if not per_core:
        return 0.0
    return sum(per_core) / len(per_core)


class CpuCheck(ThresholdCheck):
    name = "cpu"
    scan_key = "cpu_usage"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.cpu

    async def scan(self) -> CheckResult:
        provider = self.context.provider
        per_core = await asyncio.to_thread(provider.cpu_per_core, self.settings.cpu_sample_window)
        total = average_busy(per_core)
        findings = [f"cpu {format_percent(total)}%"]

        if classify(total, self.settings.cpu) is Severity.OK:
            return CheckResult(name=self.name, status=CheckStatus.OK, findings=findings)

        evidence = cpu_report(per_core, await asyncio.to_thread(provider.processes, self.settings.cpu_sample_window))
        evaluation = await self.evaluate("cpu", "CPU", total, self.settings.cpu, evidence)
        return result_from(self.name, [evaluation], findings)
