"""Telegram update handling: /start, photo uploads and misfiled documents."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sketch_time.core.errors import AppError, NotificationError
from sketch_time.core.logging import log_event
from sketch_time.features.bot import messages
from sketch_time.features.notifications.service import Notifier
from sketch_time.features.sessions.service import SessionService
from sketch_time.models.upload import UploadMetadata


class TelegramUser(BaseModel):
    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None


class TelegramPhotoSize(BaseModel):
    file_id: str
    width: int = 0
    height: int = 0


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    sender: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None
    photo: Optional[List[TelegramPhotoSize]] = None
    document: Optional[dict] = None


class TelegramUpdate(BaseModel):
    update_id: int
    message: Optional[TelegramMessage] = None


class BotHandler:
    def __init__(self, sessions: SessionService, notifier: Notifier, *, app_url: str):
        self._sessions = sessions
        self._notifier = notifier
        self._app_url = app_url

    async def handle(self, update: TelegramUpdate) -> Optional[str]:
        """Process one update. Returns the handled kind, or None when ignored."""
        message = update.message
        if message is None or message.sender is None:
            return None
        user = message.sender

        if message.photo:
            await self._handle_photo(user, message.photo)
            return "photo"
        if message.document is not None:
            await self._reply(user.id, messages.DOCUMENT_HINT)
            return "document"
        command = message.text.split() if message.text else []
        if command and command[0].split("@")[0] == "/start":
            await self._reply(
                user.id,
                messages.WELCOME_MESSAGE,
                reply_markup=messages.web_app_keyboard("🎨 Open Sketch Tracker", self._app_url),
            )
            return "start"
        return None

    async def _handle_photo(self, user: TelegramUser, sizes: List[TelegramPhotoSize]) -> None:
        # Telegram lists sizes smallest first
        largest = sizes[-1]
        metadata = UploadMetadata(
            media_ref=largest.file_id,
            display_name=user.username or user.first_name or "Unknown",
        )
        try:
            stats = await self._sessions.record_upload_and_complete(user.id, metadata)
        except AppError as exc:
            log_event("error", "bot.upload_failed", user_id=user.id, error_code=exc.code, extra={"error": exc.message})
            await self._reply(user.id, messages.UPLOAD_FAILED)
            return

        await self._reply(
            user.id,
            messages.upload_reply(stats),
            reply_markup=messages.web_app_keyboard("📊 View Full Stats", self._app_url),
        )

    async def _reply(self, user_id: int, text: str, *, reply_markup: Optional[dict] = None) -> None:
        try:
            await self._notifier.notify(user_id, text, reply_markup=reply_markup)
        except NotificationError as exc:
            log_event("warning", "notify.failed", user_id=user_id, error_code=exc.code, extra={"error": exc.message})
