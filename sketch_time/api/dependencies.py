"""Application-scoped collaborators and the FastAPI dependency that hands them out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from sketch_time.core.config import Settings, settings as default_settings
from sketch_time.core.dates import Clock
from sketch_time.features.bot.handlers import BotHandler
from sketch_time.features.notifications.service import Notifier, build_notifier
from sketch_time.features.sessions.service import SessionService
from sketch_time.features.stats.service import StatsAggregator
from sketch_time.features.timers.registry import Sleep, TimerRegistry
from sketch_time.features.uploads.store import UploadStore, get_upload_store


@dataclass
class Services:
    store: UploadStore
    timers: TimerRegistry
    notifier: Notifier
    sessions: SessionService
    bot: BotHandler


def build_services(
    cfg: Optional[Settings] = None,
    *,
    store: Optional[UploadStore] = None,
    notifier: Optional[Notifier] = None,
    clock: Optional[Clock] = None,
    sleep: Optional[Sleep] = None,
) -> Services:
    cfg = cfg or default_settings
    store = store if store is not None else get_upload_store(clock=clock)
    notifier = notifier if notifier is not None else build_notifier(cfg)
    timers = TimerRegistry(clock=clock, sleep=sleep)
    sessions = SessionService(
        store,
        timers,
        notifier,
        stats=StatsAggregator(store, history_limit=cfg.RECENT_HISTORY_LIMIT, clock=clock),
        clock=clock,
        max_timer_minutes=cfg.TIMER_MAX_MINUTES,
    )
    bot = BotHandler(sessions, notifier, app_url=cfg.APP_URL)
    return Services(store=store, timers=timers, notifier=notifier, sessions=sessions, bot=bot)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_sessions(request: Request) -> SessionService:
    return get_services(request).sessions
