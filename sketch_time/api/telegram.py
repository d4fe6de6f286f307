from __future__ import annotations

from fastapi import APIRouter, Depends

from sketch_time.api.dependencies import Services, get_services
from sketch_time.features.bot.handlers import TelegramUpdate

router = APIRouter(prefix="/telegram", tags=["telegram"])


@router.post("/webhook")
async def telegram_webhook(update: TelegramUpdate, services: Services = Depends(get_services)):
    """Bot webhook. Always acknowledges so Telegram does not redeliver."""
    handled = await services.bot.handle(update)
    return {"ok": True, "handled": handled}
