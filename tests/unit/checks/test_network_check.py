"""Tests for checks.network module."""

import pytest

from netwatch.checks.base import CheckStatus
from netwatch.checks.network import NetworkBandwidthCheck, select_interfaces
from netwatch.network.snapshot_differ import NetworkSample


def _sample(iface: str, rx: int, tx: int = 0, rx_err: int = 0) -> NetworkSample:
    return NetworkSample(iface=iface, rx_bytes=rx, tx_bytes=tx, rx_err=rx_err, tx_err=0, sampled_at=1_700_000_000.0)


def test_select_interfaces_excludes_loopback_by_default() -> None:
    samples = [_sample("lo", 0), _sample("eth0", 0)]

    assert [sample.iface for sample in select_interfaces(samples, ())] == ["eth0"]
    assert [sample.iface for sample in select_interfaces(samples, ("lo",))] == ["lo"]


@pytest.fixture
def net_settings(settings_factory):
    def _build(threshold: int):
        return settings_factory(NET_SCAN_INTERVAL="0", NET_SAMPLE_WINDOW="0.25", NET_THRESHOLD_KB_S=str(threshold))

    return _build


@pytest.mark.asyncio
async def test_rate_at_threshold_alerts(net_settings, context_factory, provider, notifier) -> None:
    context = context_factory(net_settings(4))
    # 1024 bytes over 0.25s is 4 KiB/s.
    provider.net_samples = [
        [_sample("lo", 0), _sample("eth0", 0)],
        [_sample("lo", 10_000_000), _sample("eth0", 1024)],
    ]

    result = await NetworkBandwidthCheck(context).run()
    await context.background.drain(1.0)

    assert result.status is CheckStatus.ALERTING
    assert result.findings == ["iface=eth0 rx_kB_s=4 tx_kB_s=0 rx_err_delta=0 tx_err_delta=0"]
    assert notifier.subjects == ["Warning: Network anomalies"]
    body = notifier.alerts[0].body
    assert body.startswith("Network interface delta over 0.25s sample")
    assert "iface=lo" not in body


@pytest.mark.asyncio
async def test_rate_below_threshold_is_ok(net_settings, context_factory, provider, notifier) -> None:
    context = context_factory(net_settings(5))
    provider.net_samples = [[_sample("eth0", 0)], [_sample("eth0", 1024)]]

    result = await NetworkBandwidthCheck(context).run()

    assert result.status is CheckStatus.OK
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_errors_alert_regardless_of_rate(net_settings, context_factory, provider, notifier, caplog) -> None:
    context = context_factory(net_settings(10240))
    provider.net_samples = [[_sample("eth0", 0, rx_err=1)], [_sample("eth0", 0, rx_err=4)]]

    result = await NetworkBandwidthCheck(context).run()
    await context.background.drain(1.0)

    assert result.status is CheckStatus.ALERTING
    assert "warning: errors on eth0 (rx_err_delta=3 tx_err_delta=0)" in caplog.text
    assert len(notifier.alerts) == 1


@pytest.mark.asyncio
async def test_errors_and_bandwidth_on_one_interface_both_logged(net_settings, context_factory, provider, caplog) -> None:
    context = context_factory(net_settings(4))
    provider.net_samples = [[_sample("eth0", 0, rx_err=1)], [_sample("eth0", 2048, rx_err=3)]]

    result = await NetworkBandwidthCheck(context).run()
    await context.background.drain(1.0)

    assert "warning: errors on eth0 (rx_err_delta=2 tx_err_delta=0)" in caplog.text
    assert "warning: bandwidth on eth0 reached rx=8KiB/s tx=0KiB/s (threshold 4KiB/s)" in caplog.text
    assert result.findings == ["iface=eth0 rx_kB_s=8 tx_kB_s=0 rx_err_delta=2 tx_err_delta=0"]
