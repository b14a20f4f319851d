from __future__ import annotations

"""Alert delivery through mail(1) and through a user supplied command."""

import asyncio
import logging
import re
import shlex
from pathlib import Path

from ..background import BackgroundTasks
from ..state.files import atomic_write_text
from .base import Notifier
from .models import Alert

logger = logging.getLogger(__name__)

_NOT_SENT_MARKER = "not sent"
_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]+")


class MailNotifier(Notifier):
    """Pipes the alert body into ``mail -s <subject> <recipient>``."""

    name = "mail"

    def __init__(self, recipient: str, *, timeout_seconds: float, mail_command: str = "mail") -> None:
        self.recipient = recipient
        self.timeout_seconds = timeout_seconds
        self.mail_command = mail_command

    async def send(self, alert: Alert) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.mail_command,
                "-s",
                alert.subject,
                self.recipient,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.error("error: could not send alert e-mail (%s: %s)", self.mail_command, exc)
            return False

        try:
            output, _ = await asyncio.wait_for(proc.communicate(alert.body.encode("utf-8")), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
            proc.kill()
            await proc.wait()
            logger.error("error: could not send alert e-mail (%s timed out after %.0fs)", self.mail_command, self.timeout_seconds)
            return False

        message = output.decode("utf-8", errors="replace").strip()
        if _NOT_SENT_MARKER in message.lower() or proc.returncode != 0:
            logger.error("error: could not send alert e-mail: %s", message or f"exit status {proc.returncode}")
            return False
        return True


class CommandNotifier(Notifier):
    """
    Hands the alert to ``CUSTOM_EMAIL_COMMAND recipient subject body_file``.

    The body is written to an evidence file under the cache directory and the
    command is launched detached; its outcome is not observed.
    """

    name = "command"

    def __init__(self, command: str, recipient: str, *, evidence_dir: Path, background: BackgroundTasks) -> None:
        self.argv = shlex.split(command)
        self.recipient = recipient
        self.evidence_dir = evidence_dir
        self._background = background

    def evidence_path(self, alert: Alert) -> Path:
        return self.evidence_dir / f"{_SAFE_NAME.sub('_', alert.alert_type)}.txt"

    async def send(self, alert: Alert) -> bool:
        body_path = self.evidence_path(alert)
        try:
            atomic_write_text(body_path, alert.body + "\n")
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.error("Unable to write alert body %s: %s", body_path, exc)
            return False
        argv = [*self.argv, self.recipient, alert.subject, str(body_path)]
        return self._background.spawn_detached(argv, description=f"notification command for {alert.alert_type}")


__all__ = ["CommandNotifier", "MailNotifier"]
