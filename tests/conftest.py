"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from netwatch.background import BackgroundTasks
from netwatch.checks.base import CheckContext
from netwatch.config.runtime import SettingsSource
from netwatch.config.settings import NetwatchSettings, StatePaths, build_settings
from netwatch.evaluation.threshold import ThresholdEvaluator
from netwatch.metrics.models import DiskUsage, MemorySample, ProcessEntry
from netwatch.metrics.provider import MetricProvider
from netwatch.network.snapshot_differ import NetworkSample
from netwatch.notify.base import Notifier
from netwatch.notify.dispatcher import AlertDispatcher
from netwatch.notify.models import Alert
from netwatch.state.manifest_store import ManifestStore
from netwatch.state.throttle_store import ThrottleStore


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMetricProvider(MetricProvider):
    """Returns canned samples; ``net_samples`` is consumed one snapshot per call."""

    def __init__(self) -> None:
        self.memory_sample = MemorySample(mem_total=100, mem_used=10, swap_total=0, swap_used=0)
        self.cores: List[float] = [5.0]
        self.disk_usages: List[DiskUsage] = []
        self.net_samples: List[List[NetworkSample]] = []
        self.process_table: List[ProcessEntry] = []
        self.process_calls = 0
        self.cpu_sample_windows: List[float] = []

    def memory(self) -> MemorySample:
        return self.memory_sample

    def cpu_per_core(self, sample_seconds: float) -> List[float]:
        return list(self.cores)

    def disks(self) -> List[DiskUsage]:
        return list(self.disk_usages)

    def net_counters(self) -> List[NetworkSample]:
        return self.net_samples.pop(0)

    def processes(self, cpu_sample_seconds: float = 0.0) -> List[ProcessEntry]:
        self.process_calls += 1
        self.cpu_sample_windows.append(cpu_sample_seconds)
        return list(self.process_table)


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self) -> None:
        self.alerts: List[Alert] = []

    async def send(self, alert: Alert) -> bool:
        self.alerts.append(alert)
        return True

    @property
    def subjects(self) -> List[str]:
        return [alert.subject for alert in self.alerts]


def make_settings(home: Path, values: Optional[Dict[str, str]] = None) -> NetwatchSettings:
    paths = StatePaths.under(home)
    paths.ensure()
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    source = SettingsSource(file_values=values or {}, environ={})
    return build_settings(source, paths, paths.config_dir / "netwatch.conf")


def make_context(
    settings: NetwatchSettings,
    provider: MetricProvider,
    notifiers: Sequence[Notifier],
    clock: FakeClock,
) -> CheckContext:
    background = BackgroundTasks()
    throttle = ThrottleStore(settings.paths.timers_dir, clock=clock)
    return CheckContext(
        settings=settings,
        throttle=throttle,
        evaluator=ThresholdEvaluator(throttle),
        manifest_store=ManifestStore(settings.manifest_file),
        provider=provider,
        dispatcher=AlertDispatcher(notifiers, background),
        background=background,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_700_000_000.0)


@pytest.fixture
def provider() -> FakeMetricProvider:
    return FakeMetricProvider()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings(tmp_path: Path) -> NetwatchSettings:
    return make_settings(tmp_path / "netwatch")


@pytest.fixture
def context(settings: NetwatchSettings, provider: FakeMetricProvider, notifier: RecordingNotifier, clock: FakeClock) -> CheckContext:
    return make_context(settings, provider, [notifier], clock)


@pytest.fixture
def settings_factory(tmp_path: Path):
    """Build settings under a fresh home with extra ``KEY=VALUE`` overrides."""

    def _factory(**values: str) -> NetwatchSettings:
        return make_settings(tmp_path / "netwatch", values)

    return _factory


@pytest.fixture
def context_factory(provider: FakeMetricProvider, notifier: RecordingNotifier, clock: FakeClock):
    def _factory(settings: NetwatchSettings) -> CheckContext:
        return make_context(settings, provider, [notifier], clock)

    return _factory
