"""Plain-text evidence attached to alerts as the message body."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..metrics.models import DiskUsage, MemorySample, ProcessEntry

_MIB = 1024 * 1024
_TOP_PROCESSES = 15


def _mib(value: int) -> int:
    return value // _MIB


def _pct(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.1f}"


def top_processes(processes: Iterable[ProcessEntry], *, by: str, limit: int = _TOP_PROCESSES) -> List[str]:
    """Render the ``limit`` heaviest processes ordered by ``cpu_percent`` or ``memory_percent``."""

    ranked = sorted(processes, key=lambda entry: getattr(entry, by) or 0.0, reverse=True)[:limit]
    lines = [f"{'PID':>7} {'%CPU':>6} {'%MEM':>6} COMMAND"]
    for entry in ranked:
        lines.append(f"{entry.pid:>7} {_pct(entry.cpu_percent):>6} {_pct(entry.memory_percent):>6} {entry.text[:120]}")
    return lines


def memory_report(sample: MemorySample, processes: Sequence[ProcessEntry]) -> str:
    lines = [
        "Memory and swap usage (MiB)",
        "",
        f"{'':6} {'total':>10} {'used':>10} {'free':>10}",
        f"{'Mem:':6} {_mib(sample.mem_total):>10} {_mib(sample.mem_used):>10} {_mib(sample.mem_total - sample.mem_used):>10}",
        f"{'Swap:':6} {_mib(sample.swap_total):>10} {_mib(sample.swap_used):>10} {_mib(sample.swap_total - sample.swap_used):>10}",
        "",
        "Top processes by memory",
        "",
        *top_processes(processes, by="memory_percent"),
    ]
    return "\n".join(lines)


def cpu_report(per_core: Sequence[float], processes: Sequence[ProcessEntry]) -> str:
    lines = ["Per-core CPU busy percentage", ""]
    lines.extend(f"cpu{index}: {value:.1f}%" for index, value in enumerate(per_core))
    lines.extend(["", "Top processes by CPU", "", *top_processes(processes, by="cpu_percent")])
    return "\n".join(lines)


def disk_report(disks: Sequence[DiskUsage]) -> str:
    lines = [
        "Filesystem usage",
        "",
        f"{'Filesystem':<30} {'Size(MiB)':>10} {'Used(MiB)':>10} {'Use%':>5} Mounted on",
    ]
    for disk in disks:
        lines.append(
            f"{disk.device:<30} {_mib(disk.total):>10} {_mib(disk.used):>10} {int(disk.percent):>4}% {disk.mountpoint}"
        )
    return "\n".join(lines)


__all__ = ["cpu_report", "disk_report", "memory_report", "top_processes"]
