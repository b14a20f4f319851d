from __future__ import annotations

"""Builds the notifier chain from configuration."""

import logging
from typing import List

from ..background import BackgroundTasks
from ..config.settings import NetwatchSettings
from .base import Notifier
from .mail import CommandNotifier, MailNotifier
from .telegram import TelegramClient, TelegramNotifier

logger = logging.getLogger(__name__)


def build_notifiers(settings: NetwatchSettings, background: BackgroundTasks) -> List[Notifier]:
    notifiers: List[Notifier] = []
    if settings.custom_email_command:
        notifiers.append(
            CommandNotifier(
                settings.custom_email_command,
                settings.email_to,
                evidence_dir=settings.paths.cache_dir,
                background=background,
            )
        )
    else:
        notifiers.append(MailNotifier(settings.email_to, timeout_seconds=settings.notify_timeout))

    if settings.telegram_bot_token and settings.telegram_chat_ids:
        client = TelegramClient(settings.telegram_bot_token, timeout_seconds=settings.notify_timeout)
        notifiers.append(TelegramNotifier(client, settings.telegram_chat_ids))
    elif settings.telegram_bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN set without TELEGRAM_CHAT_IDS; Telegram alerts disabled")

    return notifiers


__all__ = ["build_notifiers"]
