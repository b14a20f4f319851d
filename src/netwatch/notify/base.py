from __future__ import annotations

"""Notifier interface."""

from abc import ABC, abstractmethod

from .models import Alert


class Notifier(ABC):
    """Delivers an alert to a recipient."""

    name = "notifier"

    @abstractmethod
    async def send(self, alert: Alert) -> bool:
        """Deliver ``alert``; return False (after logging) when delivery failed."""


__all__ = ["Notifier"]
