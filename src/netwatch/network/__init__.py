"""Interface counter sampling and delta computation."""

from .snapshot_differ import NetworkDelta, NetworkSample, SnapshotDiffer, network_deltas

__all__ = ["NetworkDelta", "NetworkSample", "SnapshotDiffer", "network_deltas"]
