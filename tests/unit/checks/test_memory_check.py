"""Tests for checks.memory module."""

import pytest

from netwatch.checks.base import CheckStatus
from netwatch.checks.memory import MemoryCheck
from netwatch.metrics.models import MemorySample, ProcessEntry


@pytest.mark.asyncio
async def test_healthy_sample_skips_process_table(context, provider, notifier) -> None:
    result = await MemoryCheck(context).run()
    await context.background.drain(1.0)

    assert result.status is CheckStatus.OK
    assert provider.process_calls == 0
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_scan_interval_throttles_repeat_runs(context, clock) -> None:
    check = MemoryCheck(context)

    assert (await check.run()).status is CheckStatus.OK
    clock.advance(10)
    assert (await check.run()).status is CheckStatus.SKIPPED
    clock.advance(30)
    assert (await check.run()).status is CheckStatus.OK


@pytest.mark.asyncio
async def test_critical_memory_end_to_end(settings_factory, context_factory, provider, notifier, clock) -> None:
    context = context_factory(settings_factory(MEM_SCAN_INTERVAL="0", MEM_EMAIL_CRIT_INTERVAL="3600"))
    provider.memory_sample = MemorySample(mem_total=1000, mem_used=950, swap_total=0, swap_used=0)
    provider.process_table = [ProcessEntry(pid=42, name="hog", cmdline=["hog", "--eat"], memory_percent=80.0)]
    check = MemoryCheck(context)
    start = clock.now

    first = await check.run()
    clock.now = start + 10
    second = await check.run()
    clock.now = start + 3601
    third = await check.run()
    await context.background.drain(1.0)

    assert [result.alerts_sent for result in (first, second, third)] == [1, 0, 1]
    assert all(result.status is CheckStatus.ALERTING for result in (first, second, third))
    assert notifier.subjects == ["Critical: Memory Usage 95%", "Critical: Memory Usage 95%"]
    assert notifier.alerts[0].alert_type == "mem_email_critical"
    assert "hog --eat" in notifier.alerts[0].body


@pytest.mark.asyncio
async def test_swap_warning_uses_its_own_resource(context, provider, notifier, caplog) -> None:
    provider.memory_sample = MemorySample(mem_total=1000, mem_used=100, swap_total=1000, swap_used=700)

    result = await MemoryCheck(context).run()
    await context.background.drain(1.0)

    assert result.status is CheckStatus.ALERTING
    assert notifier.subjects == ["Warning: Swap Usage 70%"]
    assert notifier.alerts[0].alert_type == "swap_email_warning"
    assert "warning: swap usage reached 70%" in caplog.text


def test_no_swap_reports_zero() -> None:
    sample = MemorySample(mem_total=100, mem_used=50, swap_total=0, swap_used=0)

    assert sample.swap_percent == 0.0
    assert sample.mem_percent == pytest.approx(50.0)
