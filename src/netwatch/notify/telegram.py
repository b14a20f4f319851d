from __future__ import annotations

"""Telegram Bot API delivery used as an additional alert channel."""

import asyncio
import logging
from typing import List, Sequence

import aiohttp

from .base import Notifier
from .models import Alert

logger = logging.getLogger(__name__)

API_ROOT = "https://api.telegram.org"
_MAX_MESSAGE_LENGTH = 4096
_ELLIPSIS = "..."


class TelegramClient:
    """Posts plain-text messages through ``sendMessage``, one HTTP session per batch of chats."""

    def __init__(self, token: str, *, timeout_seconds: float, api_root: str = API_ROOT) -> None:
        self.endpoint = f"{api_root}/bot{token}/sendMessage"
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def broadcast(self, chat_ids: Sequence[str], text: str) -> List[str]:
        """
        Send ``text`` to every chat.

        Returns:
            The chat ids the message could not be delivered to; each failure is logged
        """
        failed: List[str] = []
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            for chat_id in chat_ids:
                if not await self._post(session, chat_id, text):
                    failed.append(chat_id)
        return failed

    async def _post(self, session: aiohttp.ClientSession, chat_id: str, text: str) -> bool:
        payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
        try:
            async with session.post(self.endpoint, json=payload) as response:
                if response.status < 300:
                    return True
                detail = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:  # policy_guard: allow-silent-handler
            logger.error("Telegram delivery to %s failed: %s", chat_id, exc)
            return False
        logger.error("Telegram delivery to %s rejected (HTTP %d): %s", chat_id, response.status, detail)
        return False


def format_message(alert: Alert) -> str:
    text = f"{alert.subject}\n\n{alert.body}"
    if len(text) > _MAX_MESSAGE_LENGTH:
        text = text[: _MAX_MESSAGE_LENGTH - len(_ELLIPSIS)] + _ELLIPSIS
    return text


class TelegramNotifier(Notifier):
    name = "telegram"

    def __init__(self, client: TelegramClient, chat_ids: Sequence[str]) -> None:
        self.client = client
        self.chat_ids = tuple(chat_ids)

    async def send(self, alert: Alert) -> bool:
        failed = await self.client.broadcast(self.chat_ids, format_message(alert))
        return not failed


__all__ = ["API_ROOT", "TelegramClient", "TelegramNotifier", "format_message"]
