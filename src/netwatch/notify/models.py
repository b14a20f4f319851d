from __future__ import annotations

"""Shared data structures for alert notification."""

import time
from dataclasses import dataclass, field

from ..evaluation.threshold import Severity


@dataclass(frozen=True)
class Alert:
    """One outgoing notification: a subject line plus the evidence body."""

    subject: str
    body: str
    severity: Severity
    alert_type: str
    timestamp: float = field(default_factory=time.time)


__all__ = ["Alert"]
