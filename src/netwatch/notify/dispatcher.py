from __future__ import annotations

"""Non-blocking alert fan-out."""

import logging
from typing import Sequence

from ..background import BackgroundTasks
from .base import Notifier
from .models import Alert

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """Schedules delivery of an alert on every configured notifier and returns immediately."""

    def __init__(self, notifiers: Sequence[Notifier], background: BackgroundTasks) -> None:
        self.notifiers = tuple(notifiers)
        self._background = background

    def dispatch(self, alert: Alert) -> None:
        if not self.notifiers:
            logger.warning("No notifier configured; dropping alert %r", alert.subject)
            return
        logger.info("Dispatching alert %r", alert.subject)
        for notifier in self.notifiers:
            self._background.schedule(self._deliver(notifier, alert), description=f"{notifier.name}:{alert.alert_type}")

    async def _deliver(self, notifier: Notifier, alert: Alert) -> None:
        delivered = await notifier.send(alert)
        if delivered:
            logger.debug("Alert %r delivered via %s", alert.subject, notifier.name)


__all__ = ["AlertDispatcher"]
