"""Tests for checks.servers module."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from netwatch.checks.base import CheckStatus
from netwatch.checks.servers import ServerReachabilityCheck, probe, probe_tcp
from netwatch.lists import ServerEndpoint


@pytest.fixture
def servers_context(settings_factory, context_factory):
    settings = settings_factory(SERVERS_SCAN_INTERVAL="0")
    settings.server_list.write_text("up.example:443\ndown1.example:22\ndown2.example\n[::1]:9\nbad:entry\n")
    return context_factory(settings)


@pytest.mark.asyncio
async def test_unreachable_servers_produce_one_alert(servers_context, notifier, monkeypatch, caplog) -> None:
    async def fake_probe(endpoint: ServerEndpoint, timeout: float) -> bool:
        return endpoint.host == "up.example"

    monkeypatch.setattr("netwatch.checks.servers.probe", fake_probe)

    result = await ServerReachabilityCheck(servers_context).run()
    await servers_context.background.drain(1.0)

    assert result.status is CheckStatus.ALERTING
    assert result.findings == ["down1.example:22", "down2.example", "[::1]:9"]
    assert notifier.subjects == ["Warning: Servers seem offline"]
    assert notifier.alerts[0].body == "Offline servers:\n\ndown1.example:22\ndown2.example\n[::1]:9"
    assert "warning: server down2.example seems offline" in caplog.text


@pytest.mark.asyncio
async def test_alert_is_throttled_but_findings_remain(servers_context, notifier, monkeypatch) -> None:
    monkeypatch.setattr("netwatch.checks.servers.probe", AsyncMock(return_value=False))
    check = ServerReachabilityCheck(servers_context)

    first = await check.run()
    second = await check.run()
    await servers_context.background.drain(1.0)

    assert (first.alerts_sent, second.alerts_sent) == (1, 0)
    assert second.status is CheckStatus.ALERTING
    assert len(notifier.alerts) == 1


@pytest.mark.asyncio
async def test_probe_concurrency_is_bounded(settings_factory, context_factory, monkeypatch) -> None:
    settings = settings_factory(SERVERS_SCAN_INTERVAL="0", SERVER_PROBE_CONCURRENCY="2")
    settings.server_list.write_text("\n".join(f"host{index}:80" for index in range(6)) + "\n")
    context = context_factory(settings)
    active = {"now": 0, "peak": 0}

    async def fake_probe(endpoint: ServerEndpoint, timeout: float) -> bool:
        active["now"] += 1
        active["peak"] = max(active["peak"], active["now"])
        await asyncio.sleep(0.01)
        active["now"] -= 1
        return True

    monkeypatch.setattr("netwatch.checks.servers.probe", fake_probe)

    result = await ServerReachabilityCheck(context).run()

    assert result.status is CheckStatus.OK
    assert active["peak"] == 2


@pytest.mark.asyncio
async def test_missing_server_list_is_ok(context, notifier) -> None:
    result = await ServerReachabilityCheck(context).run()

    assert result.status is CheckStatus.OK
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_probe_tcp_timeout_is_unreachable() -> None:
    async def never_connects(*_args, **_kwargs):
        await asyncio.sleep(10)

    with patch("asyncio.open_connection", never_connects):
        assert await probe_tcp(ServerEndpoint("slow.example", 80), timeout=0.01) is False


@pytest.mark.asyncio
async def test_probe_tcp_closes_connection() -> None:
    writer = MagicMock()
    writer.wait_closed = AsyncMock(return_value=None)

    with patch("asyncio.open_connection", AsyncMock(return_value=(MagicMock(), writer))):
        assert await probe_tcp(ServerEndpoint("ok.example", 80), timeout=1.0) is True

    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_icmp_probe_runs_ping() -> None:
    proc = MagicMock()
    proc.wait = AsyncMock(return_value=0)

    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as mock_exec:
        assert await probe(ServerEndpoint("gw.example"), timeout=5.0) is True

    assert mock_exec.await_args.args == ("ping", "-c", "1", "-W", "5", "gw.example")
