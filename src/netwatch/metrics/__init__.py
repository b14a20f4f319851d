"""Structured host samples consumed by the checks."""

from .models import DiskUsage, MemorySample, ProcessEntry
from .provider import MetricProvider, PsutilMetricProvider

__all__ = [
    "DiskUsage",
    "MemorySample",
    "MetricProvider",
    "ProcessEntry",
    "PsutilMetricProvider",
]
