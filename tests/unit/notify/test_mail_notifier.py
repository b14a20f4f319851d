"""Tests for notify.mail module."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from netwatch.background import BackgroundTasks
from netwatch.evaluation.threshold import Severity
from netwatch.notify.mail import CommandNotifier, MailNotifier
from netwatch.notify.models import Alert

ALERT = Alert(subject="Warning: Servers seem offline", body="Offline servers:\n\ndb:5432", severity=Severity.WARNING, alert_type="servers_email_status")


def _process(output: bytes, returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(output, None))
    proc.returncode = returncode
    return proc


class TestMailNotifier:
    @pytest.mark.asyncio
    async def test_pipes_body_to_mail(self) -> None:
        proc = _process(b"")
        notifier = MailNotifier("ops@example.com", timeout_seconds=5.0)

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as mock_exec:
            assert await notifier.send(ALERT) is True

        assert mock_exec.await_args.args == ("mail", "-s", ALERT.subject, "ops@example.com")
        proc.communicate.assert_awaited_once_with(ALERT.body.encode("utf-8"))

    @pytest.mark.asyncio
    async def test_not_sent_output_is_a_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        notifier = MailNotifier("ops@example.com", timeout_seconds=5.0)

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=_process(b"... message not sent."))):
            assert await notifier.send(ALERT) is False

        assert "error: could not send alert e-mail" in caplog.text

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_a_failure(self) -> None:
        notifier = MailNotifier("ops@example.com", timeout_seconds=5.0)

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=_process(b"", returncode=1))):
            assert await notifier.send(ALERT) is False

    @pytest.mark.asyncio
    async def test_missing_mail_binary(self) -> None:
        notifier = MailNotifier("ops@example.com", timeout_seconds=5.0)

        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("mail"))):
            assert await notifier.send(ALERT) is False

    @pytest.mark.asyncio
    async def test_timeout_kills_mail(self) -> None:
        proc = MagicMock()

        async def _hang(_input):
            await asyncio.sleep(10)

        proc.communicate = _hang
        proc.wait = AsyncMock(return_value=-9)
        notifier = MailNotifier("ops@example.com", timeout_seconds=0.01)

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            assert await notifier.send(ALERT) is False

        proc.kill.assert_called_once()


class TestCommandNotifier:
    @pytest.mark.asyncio
    async def test_writes_evidence_and_spawns_command(self, tmp_path: Path) -> None:
        background = BackgroundTasks()
        background.spawn_detached = MagicMock(return_value=True)
        notifier = CommandNotifier("/usr/local/bin/notify --html", "ops@example.com", evidence_dir=tmp_path, background=background)

        assert await notifier.send(ALERT) is True

        body_file = tmp_path / "servers_email_status.txt"
        assert body_file.read_text() == ALERT.body + "\n"
        background.spawn_detached.assert_called_once_with(
            ["/usr/local/bin/notify", "--html", "ops@example.com", ALERT.subject, str(body_file)],
            description="notification command for servers_email_status",
        )
