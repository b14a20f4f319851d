from __future__ import annotations

"""
Check registry and per-invocation orchestration.

An invocation resolves the requested command to a list of checks, builds one
``CheckContext`` shared by all of them, runs them (concurrently unless
threading is disabled) and finally flushes pending notifications.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Type

from .background import BackgroundTasks
from .checks import (
    Check,
    CheckContext,
    CheckResult,
    CheckStatus,
    CpuCheck,
    DirectoryIntegrityCheck,
    DiskCheck,
    MemoryCheck,
    NetworkBandwidthCheck,
    ServerReachabilityCheck,
    ServiceLivenessCheck,
)
from .config.settings import NetwatchSettings
from .evaluation.threshold import ThresholdEvaluator
from .metrics.provider import MetricProvider, PsutilMetricProvider
from .notify.dispatcher import AlertDispatcher
from .notify.factory import build_notifiers
from .service_manager import ServiceManager
from .state.manifest_store import ManifestStore
from .state.throttle_store import ThrottleStore

logger = logging.getLogger(__name__)

CHECK_REGISTRY: Dict[str, Type[Check]] = {
    "mem": MemoryCheck,
    "cpu": CpuCheck,
    "disk": DiskCheck,
    "dirs": DirectoryIntegrityCheck,
    "servers": ServerReachabilityCheck,
    "services": ServiceLivenessCheck,
    "net": NetworkBandwidthCheck,
}

COMMAND_ALIASES: Dict[str, str] = {"directories": "dirs"}

ALL_COMMAND = "all"


class UnknownCheckError(ValueError):
    """Raised when a command names no registered check."""


def resolve_checks(command: str) -> List[Type[Check]]:
    """Map a CLI command to the check classes it runs, in registry order."""

    if command == ALL_COMMAND:
        return list(CHECK_REGISTRY.values())
    name = COMMAND_ALIASES.get(command, command)
    try:
        return [CHECK_REGISTRY[name]]
    except KeyError:
        raise UnknownCheckError(f"Unknown check {command!r}") from None


def build_context(
    settings: NetwatchSettings,
    *,
    provider: Optional[MetricProvider] = None,
    service_manager: Optional[ServiceManager] = None,
    clock: Callable[[], float] = time.time,
) -> CheckContext:
    background = BackgroundTasks()
    throttle = ThrottleStore(settings.paths.timers_dir, clock=clock)
    return CheckContext(
        settings=settings,
        throttle=throttle,
        evaluator=ThresholdEvaluator(throttle),
        manifest_store=ManifestStore(settings.manifest_file),
        provider=provider if provider is not None else PsutilMetricProvider(),
        dispatcher=AlertDispatcher(build_notifiers(settings, background), background),
        background=background,
        service_manager=service_manager,
    )


class Scheduler:
    """Runs a set of checks against one context and contains their failures."""

    def __init__(self, context: CheckContext, check_types: Sequence[Type[Check]]) -> None:
        self.context = context
        self.checks = [check_type(context) for check_type in check_types]

    async def run(self) -> List[CheckResult]:
        if self.context.settings.allow_threading:
            results = list(await asyncio.gather(*(self._run_contained(check) for check in self.checks)))
        else:
            results = [await self._run_contained(check) for check in self.checks]

        await self.context.background.drain(self.context.settings.notify_timeout)
        for result in results:
            logger.debug("Check %s finished: %s", result.name, result.status.value)
        return results

    async def _run_contained(self, check: Check) -> CheckResult:
        try:
            return await check.run()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # policy_guard: allow-silent-handler
            logger.exception("Check %s failed", check.name)
            return CheckResult(name=check.name, status=CheckStatus.FAILED, error=str(exc))


async def run_command(
    settings: NetwatchSettings,
    command: str,
    *,
    provider: Optional[MetricProvider] = None,
    service_manager: Optional[ServiceManager] = None,
    clock: Callable[[], float] = time.time,
) -> List[CheckResult]:
    """Run the checks selected by ``command`` once and return their results."""

    check_types = resolve_checks(command)
    context = build_context(settings, provider=provider, service_manager=service_manager, clock=clock)
    return await Scheduler(context, check_types).run()


__all__ = [
    "ALL_COMMAND",
    "CHECK_REGISTRY",
    "COMMAND_ALIASES",
    "Scheduler",
    "UnknownCheckError",
    "build_context",
    "resolve_checks",
    "run_command",
]
