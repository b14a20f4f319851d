"""Tests for notify.dispatcher and notify.factory modules."""

import pytest

from netwatch.background import BackgroundTasks
from netwatch.evaluation.threshold import Severity
from netwatch.notify.base import Notifier
from netwatch.notify.dispatcher import AlertDispatcher
from netwatch.notify.factory import build_notifiers
from netwatch.notify.mail import CommandNotifier, MailNotifier
from netwatch.notify.models import Alert
from netwatch.notify.telegram import TelegramNotifier

ALERT = Alert(subject="Warning: files have changed", body="+x", severity=Severity.WARNING, alert_type="directories_email_status")


class ExplodingNotifier(Notifier):
    name = "exploding"

    async def send(self, alert: Alert) -> bool:
        raise RuntimeError("transport down")


@pytest.mark.asyncio
async def test_dispatch_returns_before_delivery(notifier) -> None:
    background = BackgroundTasks()
    dispatcher = AlertDispatcher([notifier], background)

    dispatcher.dispatch(ALERT)

    assert background.pending == 1
    assert notifier.alerts == []
    await background.drain(1.0)
    assert notifier.alerts == [ALERT]


@pytest.mark.asyncio
async def test_failing_notifier_does_not_block_others(notifier, caplog) -> None:
    background = BackgroundTasks()
    dispatcher = AlertDispatcher([ExplodingNotifier(), notifier], background)

    dispatcher.dispatch(ALERT)
    await background.drain(1.0)

    assert notifier.alerts == [ALERT]
    assert "transport down" in caplog.text


@pytest.mark.asyncio
async def test_no_notifiers_logs_warning(caplog) -> None:
    AlertDispatcher([], BackgroundTasks()).dispatch(ALERT)

    assert "No notifier configured" in caplog.text


class TestBuildNotifiers:
    def test_mail_by_default(self, settings) -> None:
        notifiers = build_notifiers(settings, BackgroundTasks())

        assert [type(item) for item in notifiers] == [MailNotifier]
        assert notifiers[0].recipient == "root"

    def test_custom_command_replaces_mail(self, settings_factory) -> None:
        settings = settings_factory(CUSTOM_EMAIL_COMMAND="/usr/bin/notify")

        assert [type(item) for item in build_notifiers(settings, BackgroundTasks())] == [CommandNotifier]

    def test_telegram_requires_token_and_chats(self, settings_factory, caplog) -> None:
        with_chats = settings_factory(TELEGRAM_BOT_TOKEN="t", TELEGRAM_CHAT_IDS="1,2")
        without_chats = settings_factory(TELEGRAM_BOT_TOKEN="t")

        assert [type(item) for item in build_notifiers(with_chats, BackgroundTasks())] == [MailNotifier, TelegramNotifier]
        assert [type(item) for item in build_notifiers(without_chats, BackgroundTasks())] == [MailNotifier]
        assert "Telegram alerts disabled" in caplog.text
