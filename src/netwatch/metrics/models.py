from __future__ import annotations

"""Sample data structures returned by metric providers."""

from dataclasses import dataclass, field
from typing import List, Optional


def _percent(used: int, total: int) -> float:
    if total > 0 and used > 0:
        return used / total * 100.0
    return 0.0


@dataclass(frozen=True)
class MemorySample:
    """Memory and swap totals in bytes."""

    mem_total: int
    mem_used: int
    swap_total: int
    swap_used: int

    @property
    def mem_percent(self) -> float:
        return _percent(self.mem_used, self.mem_total)

    @property
    def swap_percent(self) -> float:
        return _percent(self.swap_used, self.swap_total)


@dataclass(frozen=True)
class DiskUsage:
    device: str
    mountpoint: str
    fstype: str
    total: int
    used: int
    percent: float


@dataclass(frozen=True)
class ProcessEntry:
    pid: int
    name: str
    cmdline: List[str] = field(default_factory=list)
    cpu_percent: Optional[float] = None
    memory_percent: Optional[float] = None

    @property
    def text(self) -> str:
        """Searchable representation: process name followed by its command line."""
        if self.cmdline:
            return f"{self.name} {' '.join(self.cmdline)}"
        return self.name


__all__ = ["DiskUsage", "MemorySample", "ProcessEntry"]
