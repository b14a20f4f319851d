from __future__ import annotations

"""Liveness of the configured services, with optional recovery."""

import asyncio
import logging
import re
from typing import List, Sequence

from ..lists import RestartAction, ServiceSpec, load_service_specs
from ..metrics.models import ProcessEntry
from .base import Check, CheckResult, CheckStatus

logger = logging.getLogger(__name__)

EMAIL_KEY = "services_email_status"


def is_running(pattern: str, processes: Sequence[ProcessEntry]) -> bool:
    """
    True when ``pattern`` matches the name or command line of any process.

    The pattern is searched as a regular expression; when it does not compile,
    a plain substring test is used instead.
    """
    try:
        compiled = re.compile(pattern)
    except re.error:
        return any(pattern in entry.text for entry in processes)
    return any(compiled.search(entry.text) for entry in processes)


class ServiceLivenessCheck(Check):
    name = "services"
    scan_key = "services_status"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.proc

    async def scan(self) -> CheckResult:
        specs = await asyncio.to_thread(load_service_specs, self.settings.proc_list)
        if not specs:
            logger.debug("No services configured in %s", self.settings.proc_list)
            return CheckResult(name=self.name, status=CheckStatus.OK)

        processes = await asyncio.to_thread(self.context.provider.processes)
        down = [spec for spec in specs if not is_running(spec.pattern, processes)]
        if not down:
            return CheckResult(name=self.name, status=CheckStatus.OK)

        findings: List[str] = []
        for spec in down:
            logger.warning("warning: service %s not running", spec.display_name)
            findings.append(f"service {spec.display_name} not running")
            await self._recover(spec)

        body = "Services status:\n\n" + "\n".join(findings)
        sent = await self.alert_if_due(EMAIL_KEY, self.settings.alerts.proc, "Warning: Services may have crashed", body)
        return CheckResult(name=self.name, status=CheckStatus.ALERTING, findings=findings, alerts_sent=int(sent))

    async def _recover(self, spec: ServiceSpec) -> None:
        action = spec.action
        if action is RestartAction.NONE:
            return
        if action is RestartAction.DEFAULT:
            manager = self.context.service_manager
            if manager is None:
                logger.error("error: cannot restart %s, no service manager available", spec.display_name)
                return
            await manager.start(spec.display_name)
            return
        self.context.background.spawn_detached(spec.argv, description=f"restart of {spec.display_name}")
