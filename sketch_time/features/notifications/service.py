"""Outbound user notifications.

Telegram Bot API when a bot token is configured, log-only otherwise.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from sketch_time.core.config import Settings, settings as default_settings
from sketch_time.core.errors import NotificationError
from sketch_time.core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

NOTIFY_TIMEOUT_SECONDS = 10


class Notifier(Protocol):
    async def notify(self, user_id: int, message: str, *, reply_markup: Optional[dict] = None) -> None:
        """Deliver ``message`` to the user or raise NotificationError."""


class LogNotifier:
    """Used when no bot token is configured."""

    async def notify(self, user_id: int, message: str, *, reply_markup: Optional[dict] = None) -> None:
        logger.info("notify.logged", extra={"user_id": user_id, "event_type": "notify.logged"})


class TelegramNotifier:
    def __init__(self, token: str, *, api_base: str = "https://api.telegram.org", timeout: float = NOTIFY_TIMEOUT_SECONDS):
        self._url = f"{api_base.rstrip('/')}/bot{token}/sendMessage"
        self._timeout = timeout

    async def notify(self, user_id: int, message: str, *, reply_markup: Optional[dict] = None) -> None:
        payload = {"chat_id": user_id, "text": message}
        if reply_markup:
            payload["reply_markup"] = reply_markup

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NotificationError(f"Failed to notify user {user_id}") from exc

        if not body.get("ok", False):
            raise NotificationError(f"Telegram rejected message for user {user_id}: {body.get('description', 'unknown')}")


def build_notifier(cfg: Optional[Settings] = None) -> Notifier:
    cfg = cfg or default_settings
    if cfg.TELEGRAM_BOT_TOKEN:
        return TelegramNotifier(
            cfg.TELEGRAM_BOT_TOKEN,
            api_base=cfg.TELEGRAM_API_BASE,
            timeout=cfg.NOTIFY_TIMEOUT_SECONDS,
        )
    return LogNotifier()
