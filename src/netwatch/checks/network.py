from __future__ import annotations

"""Per-interface bandwidth and error check."""

import asyncio
import logging
import time
from typing import List, Sequence

from ..network.snapshot_differ import NetworkDelta, NetworkSample, SnapshotDiffer, network_deltas
from .base import Check, CheckResult, CheckStatus

logger = logging.getLogger(__name__)

EMAIL_KEY = "net_email_status"
_LOOPBACK = "lo"


def select_interfaces(samples: Sequence[NetworkSample], allowed: Sequence[str]) -> List[NetworkSample]:
    """Keep the listed interfaces, or every interface but loopback when none are listed."""
    if allowed:
        wanted = set(allowed)
        return [sample for sample in samples if sample.iface in wanted]
    return [sample for sample in samples if sample.iface != _LOOPBACK]


def render_report(deltas: Sequence[NetworkDelta], window: float, sampled_at: float) -> str:
    stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(sampled_at))
    lines = [f"Network interface delta over {window:g}s sample", f"sample_time={stamp}", ""]
    lines.extend(delta.render() for delta in deltas)
    return "\n".join(lines)


class NetworkBandwidthCheck(Check):
    name = "net"
    scan_key = "net_usage"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.net

    async def scan(self) -> CheckResult:
        network = self.settings.network
        provider = self.context.provider
        differ = SnapshotDiffer(network.sample_window)

        first = select_interfaces(await asyncio.to_thread(provider.net_counters), network.interfaces)
        await asyncio.sleep(network.sample_window)
        second = select_interfaces(await asyncio.to_thread(provider.net_counters), network.interfaces)

        deltas = sorted(network_deltas(differ, first, second), key=lambda delta: delta.iface)
        findings: List[str] = []
        for delta in deltas:
            over_threshold = delta.exceeds(network.threshold_kib)
            if delta.has_errors:
                logger.warning(
                    "warning: errors on %s (rx_err_delta=%d tx_err_delta=%d)",
                    delta.iface,
                    delta.rx_err_delta,
                    delta.tx_err_delta,
                )
            if over_threshold:
                logger.warning(
                    "warning: bandwidth on %s reached rx=%dKiB/s tx=%dKiB/s (threshold %dKiB/s)",
                    delta.iface,
                    delta.rx_rate,
                    delta.tx_rate,
                    network.threshold_kib,
                )
            if delta.has_errors or over_threshold:
                findings.append(delta.render())

        if not findings:
            return CheckResult(name=self.name, status=CheckStatus.OK)

        sampled_at = second[0].sampled_at if second else time.time()
        body = render_report(deltas, network.sample_window, sampled_at)
        sent = await self.alert_if_due(EMAIL_KEY, self.settings.alerts.net, "Warning: Network anomalies", body)
        return CheckResult(name=self.name, status=CheckStatus.ALERTING, findings=findings, alerts_sent=int(sent))
