from __future__ import annotations

"""
Metric providers.

Checks only depend on ``MetricProvider``; ``PsutilMetricProvider`` reads the
live host through psutil. All methods are blocking and are meant to be run
through ``asyncio.to_thread``.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import List

import psutil

from ..network.snapshot_differ import NetworkSample
from .models import DiskUsage, MemorySample, ProcessEntry

logger = logging.getLogger(__name__)


class MetricProvider(ABC):
    """Source of structured host samples."""

    @abstractmethod
    def memory(self) -> MemorySample:
        """Current memory and swap usage."""

    @abstractmethod
    def cpu_per_core(self, sample_seconds: float) -> List[float]:
        """Busy percentage of every core measured over ``sample_seconds``."""

    @abstractmethod
    def disks(self) -> List[DiskUsage]:
        """Usage of every mounted filesystem."""

    @abstractmethod
    def net_counters(self) -> List[NetworkSample]:
        """Cumulative byte and error counters per interface."""

    @abstractmethod
    def processes(self, cpu_sample_seconds: float = 0.0) -> List[ProcessEntry]:
        """
        The live process table.

        Per-process CPU usage is only measured when ``cpu_sample_seconds`` is
        positive; otherwise ``cpu_percent`` is None.
        """


class PsutilMetricProvider(MetricProvider):
    def memory(self) -> MemorySample:
        virtual = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return MemorySample(
            mem_total=virtual.total,
            mem_used=virtual.used,
            swap_total=swap.total,
            swap_used=swap.used,
        )

    def cpu_per_core(self, sample_seconds: float) -> List[float]:
        return [float(value) for value in psutil.cpu_percent(interval=sample_seconds, percpu=True)]

    def disks(self) -> List[DiskUsage]:
        usages = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except (PermissionError, FileNotFoundError, OSError) as exc:  # policy_guard: allow-silent-handler
                logger.debug("Skipping %s: %s", partition.mountpoint, exc)
                continue
            usages.append(
                DiskUsage(
                    device=partition.device,
                    mountpoint=partition.mountpoint,
                    fstype=partition.fstype,
                    total=usage.total,
                    used=usage.used,
                    percent=usage.percent,
                )
            )
        return usages

    def net_counters(self) -> List[NetworkSample]:
        sampled_at = time.time()
        counters = psutil.net_io_counters(pernic=True)
        return [
            NetworkSample(
                iface=iface,
                rx_bytes=stats.bytes_recv,
                tx_bytes=stats.bytes_sent,
                rx_err=stats.errin,
                tx_err=stats.errout,
                sampled_at=sampled_at,
            )
            for iface, stats in counters.items()
        ]

    def processes(self, cpu_sample_seconds: float = 0.0) -> List[ProcessEntry]:
        sample_cpu = cpu_sample_seconds > 0
        live = []
        for proc in psutil.process_iter(["pid", "name", "cmdline", "memory_percent"]):
            try:
                if sample_cpu:
                    # The first reading only starts the measurement window.
                    proc.cpu_percent(None)
                live.append(proc)
            except (  # policy_guard: allow-silent-handler
                psutil.NoSuchProcess,
                psutil.AccessDenied,
            ):
                continue

        if sample_cpu and live:
            time.sleep(cpu_sample_seconds)

        entries = []
        for proc in live:
            try:
                info = proc.info
                cmdline = info.get("cmdline")
                entries.append(
                    ProcessEntry(
                        pid=info["pid"],
                        name=str(info.get("name") or ""),
                        cmdline=[str(arg) for arg in cmdline] if isinstance(cmdline, list) else [],
                        cpu_percent=proc.cpu_percent(None) if sample_cpu else None,
                        memory_percent=info.get("memory_percent"),
                    )
                )
            except (  # policy_guard: allow-silent-handler
                psutil.NoSuchProcess,
                psutil.AccessDenied,
            ):
                continue
        return entries


__all__ = ["MetricProvider", "PsutilMetricProvider"]
