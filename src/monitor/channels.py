"""Notification channels — Telegram delivery."""

from __future__ import annotations

import abc

import aiohttp
import structlog

from src.core.config import TelegramConfig

logger = structlog.get_logger(__name__)

# Telegram rejects messages longer than this.
_TELEGRAM_MAX_CHARS = 4096


class NotificationChannel(abc.ABC):
    """Base class for alert delivery channels."""

    @abc.abstractmethod
    async def send(self, recipient_id: str, text: str) -> bool:
        """Send *text* to one recipient. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class TelegramChannel(NotificationChannel):
    """Delivers plain-text messages via the Telegram Bot API."""

    def __init__(self, config: TelegramConfig) -> None:
        self._token = config.bot_token.get_secret_value()
        self._api_url = config.api_url.rstrip("/")
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, recipient_id: str, text: str) -> bool:
        url = f"{self._api_url}/bot{self._token}/sendMessage"
        payload = {
            "chat_id": recipient_id,
            "text": text[:_TELEGRAM_MAX_CHARS],
            "disable_web_page_preview": True,
        }

        try:
            session = self._get_session()
            async with session.post(url, json=payload) as resp:
                if resp.status == 200:
                    return True
                body = await resp.text()
                logger.warning(
                    "telegram_send_failed",
                    recipient=recipient_id,
                    status=resp.status,
                    body=body[:200],
                )
                return False
        except (aiohttp.ClientError, OSError):
            logger.exception("telegram_send_error", recipient=recipient_id)
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
