from __future__ import annotations

"""Two-sample delta engine for labeled counter snapshots."""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

Counters = Mapping[str, int]

_BYTES_PER_KIB = 1024


class SnapshotDiffer:
    """
    Computes per-label counter deltas between two snapshots.

    The snapshots are assumed to be taken ``interval_seconds`` apart; rates are
    derived from that fixed interval, not from wall-clock jitter.
    """

    def __init__(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds

    def deltas(self, first: Mapping[str, Counters], second: Mapping[str, Counters]) -> Dict[str, Dict[str, int]]:
        """Return ``second - first`` for every counter of every label present in both snapshots."""

        result: Dict[str, Dict[str, int]] = {}
        for label, before in first.items():
            after = second.get(label)
            if after is None:
                continue
            result[label] = {name: int(after.get(name, 0)) - int(value) for name, value in before.items()}
        return result

    def rate(self, delta: int) -> int:
        """Per-second rate of ``delta`` truncated toward zero."""
        return int(delta / self.interval_seconds)


@dataclass(frozen=True)
class NetworkSample:
    iface: str
    rx_bytes: int
    tx_bytes: int
    rx_err: int
    tx_err: int
    sampled_at: float

    def counters(self) -> Dict[str, int]:
        return {
            "rx_bytes": self.rx_bytes,
            "tx_bytes": self.tx_bytes,
            "rx_err": self.rx_err,
            "tx_err": self.tx_err,
        }


@dataclass(frozen=True)
class NetworkDelta:
    """Rates in KiB/s and error counts accumulated over the sampling window."""

    iface: str
    rx_rate: int
    tx_rate: int
    rx_err_delta: int
    tx_err_delta: int

    @property
    def has_errors(self) -> bool:
        return self.rx_err_delta > 0 or self.tx_err_delta > 0

    def exceeds(self, threshold_kib: int) -> bool:
        return self.rx_rate >= threshold_kib or self.tx_rate >= threshold_kib

    def render(self) -> str:
        return (
            f"iface={self.iface} rx_kB_s={self.rx_rate} tx_kB_s={self.tx_rate} "
            f"rx_err_delta={self.rx_err_delta} tx_err_delta={self.tx_err_delta}"
        )


def _to_kib(bytes_per_second: int) -> int:
    return int(bytes_per_second / _BYTES_PER_KIB)


def network_deltas(
    differ: SnapshotDiffer,
    first: Iterable[NetworkSample],
    second: Iterable[NetworkSample],
) -> list[NetworkDelta]:
    """Pair interface samples by name and convert their counter deltas into ``NetworkDelta`` values."""

    before = {sample.iface: sample.counters() for sample in first}
    after = {sample.iface: sample.counters() for sample in second}
    results = []
    for iface, delta in differ.deltas(before, after).items():
        results.append(
            NetworkDelta(
                iface=iface,
                rx_rate=_to_kib(differ.rate(delta["rx_bytes"])),
                tx_rate=_to_kib(differ.rate(delta["tx_bytes"])),
                rx_err_delta=delta["rx_err"],
                tx_err_delta=delta["tx_err"],
            )
        )
    return results


__all__ = ["NetworkDelta", "NetworkSample", "SnapshotDiffer", "network_deltas"]
