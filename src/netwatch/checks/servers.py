from __future__ import annotations

"""Reachability of the configured servers over TCP or ICMP."""

import asyncio
import logging
from typing import List, Optional

from ..lists import ServerEndpoint, load_endpoints
from .base import Check, CheckResult, CheckStatus

logger = logging.getLogger(__name__)

EMAIL_KEY = "servers_email_status"


async def probe_tcp(endpoint: ServerEndpoint, timeout: float) -> bool:
    """Open and immediately close a TCP connection to ``endpoint``."""

    try:
        _reader, writer = await asyncio.wait_for(asyncio.open_connection(endpoint.host, endpoint.port), timeout=timeout)
    except (OSError, asyncio.TimeoutError) as exc:  # policy_guard: allow-silent-handler
        logger.debug("TCP probe of %s failed: %s", endpoint.label, exc)
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:  # policy_guard: allow-silent-handler
        pass
    return True


async def probe_icmp(endpoint: ServerEndpoint, timeout: float) -> bool:
    """Send one echo request through ping(8)."""

    argv = ["ping", "-c", "1", "-W", str(max(1, int(timeout))), endpoint.host]
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as exc:  # policy_guard: allow-silent-handler
        logger.warning("Unable to run ping for %s: %s", endpoint.host, exc)
        return False

    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout=timeout + 1)
    except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
        proc.kill()
        await proc.wait()
        logger.debug("ICMP probe of %s timed out", endpoint.host)
        return False
    return returncode == 0


async def probe(endpoint: ServerEndpoint, timeout: float) -> bool:
    if endpoint.port is None:
        return await probe_icmp(endpoint, timeout)
    return await probe_tcp(endpoint, timeout)


class ServerReachabilityCheck(Check):
    """Probes every endpoint of ``server.list`` and sends one alert listing the unreachable ones."""

    name = "servers"
    scan_key = "servers_status"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.servers

    async def scan(self) -> CheckResult:
        endpoints = await asyncio.to_thread(load_endpoints, self.settings.server_list)
        if not endpoints:
            logger.debug("No servers configured in %s", self.settings.server_list)
            return CheckResult(name=self.name, status=CheckStatus.OK)

        probes = self.settings.probes
        semaphore = asyncio.Semaphore(probes.concurrency)

        async def _bounded(endpoint: ServerEndpoint) -> Optional[ServerEndpoint]:
            async with semaphore:
                reachable = await probe(endpoint, probes.timeout)
            return None if reachable else endpoint

        outcomes = await asyncio.gather(*(_bounded(endpoint) for endpoint in endpoints))
        offline: List[ServerEndpoint] = [endpoint for endpoint in outcomes if endpoint is not None]
        if not offline:
            return CheckResult(name=self.name, status=CheckStatus.OK)

        for endpoint in offline:
            logger.warning("warning: server %s seems offline", endpoint.label)
        findings = [endpoint.label for endpoint in offline]
        body = "Offline servers:\n\n" + "\n".join(findings)
        sent = await self.alert_if_due(EMAIL_KEY, self.settings.alerts.servers, "Warning: Servers seem offline", body)
        return CheckResult(name=self.name, status=CheckStatus.ALERTING, findings=findings, alerts_sent=int(sent))
