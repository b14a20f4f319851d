"""Runnable checks."""

from .base import Check, CheckContext, CheckResult, CheckStatus, ThresholdCheck
from .cpu import CpuCheck
from .directories import DirectoryIntegrityCheck
from .disk import DiskCheck
from .memory import MemoryCheck
from .network import NetworkBandwidthCheck
from .servers import ServerReachabilityCheck
from .services import ServiceLivenessCheck

__all__ = [
    "Check",
    "CheckContext",
    "CheckResult",
    "CheckStatus",
    "CpuCheck",
    "DirectoryIntegrityCheck",
    "DiskCheck",
    "MemoryCheck",
    "NetworkBandwidthCheck",
    "ServerReachabilityCheck",
    "ServiceLivenessCheck",
    "ThresholdCheck",
]
