from __future__ import annotations

"""Memory and swap usage check."""

import asyncio

from ..evaluation.threshold import Severity, classify
from .base import CheckResult, CheckStatus, ThresholdCheck, format_percent, result_from
from .evidence import memory_report


class MemoryCheck(ThresholdCheck):
    name = "mem"
    scan_key = "mem_usage"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.mem

    async def scan(self) -> CheckResult:
        provider = self.context.provider
        sample = await asyncio.to_thread(provider.memory)
        mem_percent = sample.mem_percent
        swap_percent = sample.swap_percent
        findings = [f"memory {format_percent(mem_percent)}%", f"swap {format_percent(swap_percent)}%"]

        if classify(mem_percent, self.settings.mem) is Severity.OK and classify(swap_percent, self.settings.swap) is Severity.OK:
            return CheckResult(name=self.name, status=CheckStatus.OK, findings=findings)

        evidence = memory_report(sample, await asyncio.to_thread(provider.processes))
        evaluations = [
            await self.evaluate("mem", "Memory", mem_percent, self.settings.mem, evidence),
            await self.evaluate("swap", "Swap", swap_percent, self.settings.swap, evidence),
        ]
        return result_from(self.name, evaluations, findings)
