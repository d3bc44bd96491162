from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Protocol, Tuple

from telegram import Bot, LinkPreviewOptions
from telegram.error import TelegramError

logger = logging.getLogger(__name__)

TELEGRAM_MAX_LENGTH = 4096
MAX_PENDING_MESSAGES = 50
WHATSAPP_PREFIX = "WhatsApp temporarily suspended. Queued message:\n"


class NotificationError(RuntimeError):
    """A channel failed to deliver a message."""


class NotificationChannel(Protocol):
    name: str

    def send(self, recipient: str, message: str) -> None:
        """Deliver *message*; raise on failure."""
        ...


def split_message(text: str, limit: int = TELEGRAM_MAX_LENGTH) -> List[str]:
    """Split *text* on line boundaries into chunks of at most *limit* chars."""
    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


class TelegramChannel:
    """Send messages through the Telegram Bot API."""

    name = "telegram"

    def __init__(self, token: str, *, bot: Bot | None = None) -> None:
        if not token or not token.strip():
            raise ValueError("Telegram bot token must be a non-empty string")
        self.bot = bot or Bot(token=token.strip())

    def send(self, recipient: str, message: str) -> None:
        if not recipient or not recipient.strip():
            raise ValueError("Telegram chat id must be a non-empty string")
        try:
            asyncio.run(self._send(recipient.strip(), message))
        except TelegramError as exc:
            raise NotificationError(f"Telegram error: {exc}") from exc

    async def _send(self, chat_id: str, message: str) -> None:
        async with self.bot:
            for chunk in split_message(message):
                await self.bot.send_message(
                    chat_id=chat_id,
                    text=chunk,
                    link_preview_options=LinkPreviewOptions(is_disabled=True),
                )


class ConsoleChannel:
    """Stand-in for Telegram when no bot is configured: only logs."""

    name = "telegram-console"

    def send(self, recipient: str, message: str) -> None:
        logger.info("[Telegram -> %s] %s", recipient, message)


class DeferredWhatsAppChannel:
    """WhatsApp is not wired yet; messages are queued and logged.

    Only the newest *max_pending* messages are kept.
    """

    name = "whatsapp"

    def __init__(self, max_pending: int = MAX_PENDING_MESSAGES) -> None:
        self.pending_messages: Deque[Tuple[str, str, datetime]] = deque(
            maxlen=max_pending
        )

    def send(self, recipient: str, message: str) -> None:
        self.pending_messages.append(
            (recipient, message, datetime.now(timezone.utc))
        )
        logger.info("[WhatsApp (pending) -> %s] %s", recipient, message)


@dataclass(frozen=True)
class Subscription:
    channel: NotificationChannel
    recipient: str
    prefix: str = ""


class NotificationDispatcher:
    """Fan a message out to every configured channel.

    A failing channel is logged and does not stop the others.
    """

    def __init__(self, subscriptions: Iterable[Subscription]) -> None:
        self.subscriptions = list(subscriptions)

    def dispatch(self, message: str) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for sub in self.subscriptions:
            name = sub.channel.name
            try:
                sub.channel.send(sub.recipient, sub.prefix + message)
            except Exception as exc:
                logger.warning("  Failed to notify via %s: %s", name, exc)
                results[name] = False
            else:
                logger.info("Notification sent via %s", name)
                results[name] = True
        return results


__all__ = [
    "ConsoleChannel",
    "DeferredWhatsAppChannel",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationError",
    "Subscription",
    "TelegramChannel",
    "WHATSAPP_PREFIX",
    "split_message",
]
