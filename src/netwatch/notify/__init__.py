"""Alert notification channels."""

from .base import Notifier
from .dispatcher import AlertDispatcher
from .factory import build_notifiers
from .mail import CommandNotifier, MailNotifier
from .models import Alert
from .telegram import TelegramClient, TelegramNotifier

__all__ = [
    "Alert",
    "AlertDispatcher",
    "CommandNotifier",
    "MailNotifier",
    "Notifier",
    "TelegramClient",
    "TelegramNotifier",
    "build_notifiers",
]
