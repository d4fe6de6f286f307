"""Daily session completion.

Three triggers complete a day's session: an upload, an explicit "done"
(only after an upload today), and the timer finishing or being cancelled.
They all land on ensure_session_complete(), an idempotent per-day upsert.
Stats are always recomputed from stored uploads, never incremented.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sketch_time.core.dates import Clock, today
from sketch_time.core.errors import NotificationError, PreconditionFailedError, ValidationError
from sketch_time.core.logging import log_event
from sketch_time.features.bot import messages
from sketch_time.features.notifications.service import Notifier
from sketch_time.features.stats.service import StatsAggregator
from sketch_time.features.timers.registry import TimerRegistry
from sketch_time.features.uploads.store import UploadStore
from sketch_time.models.streak import UserStats
from sketch_time.models.timer import CompletionReason, TimerSnapshot
from sketch_time.models.upload import UploadMetadata

DEFAULT_MAX_TIMER_MINUTES = 1440


def _require_user_id(user_id) -> int:
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise ValidationError("User ID is required")
    return user_id


class SessionService:
    """Request-facing operations for timers, uploads and daily sessions."""

    def __init__(
        self,
        store: UploadStore,
        timers: TimerRegistry,
        notifier: Notifier,
        *,
        stats: Optional[StatsAggregator] = None,
        clock: Optional[Clock] = None,
        max_timer_minutes: int = DEFAULT_MAX_TIMER_MINUTES,
    ):
        self._store = store
        self._timers = timers
        self._notifier = notifier
        self._clock = clock
        self._stats = stats or StatsAggregator(store, clock=clock)
        self._max_timer_minutes = max_timer_minutes

    # Timer operations -------------------------------------------------
    async def start_timer(self, user_id: int, duration_minutes: int) -> TimerSnapshot:
        _require_user_id(user_id)
        if (
            isinstance(duration_minutes, bool)
            or not isinstance(duration_minutes, int)
            or not 0 < duration_minutes <= self._max_timer_minutes
        ):
            raise ValidationError(f"Duration must be between 1 and {self._max_timer_minutes} minutes")
        return await self._timers.start(user_id, duration_minutes, on_complete=self._on_timer_complete)

    def get_timer(self, user_id: int) -> Optional[TimerSnapshot]:
        return self._timers.query(_require_user_id(user_id))

    async def cancel_timer(self, user_id: int) -> bool:
        """Cancelling counts as finishing early. Absent timers are a no-op."""
        return await self._timers.cancel(_require_user_id(user_id))

    # Session operations -----------------------------------------------
    async def record_upload_and_complete(self, user_id: int, metadata: UploadMetadata) -> UserStats:
        _require_user_id(user_id)
        self._store.record_upload(user_id, metadata)
        self.ensure_session_complete(user_id, trigger="upload")
        # The upload already completed the day; don't complete it again on cancel
        await self._timers.discard(user_id)
        return self._stats.get_stats(user_id)

    async def mark_done(self, user_id: int) -> UserStats:
        _require_user_id(user_id)
        if not self._store.has_upload_today(user_id):
            raise PreconditionFailedError(messages.NO_UPLOAD_YET)
        self.ensure_session_complete(user_id, trigger="done")
        return self._stats.get_stats(user_id)

    def get_stats(self, user_id: int) -> UserStats:
        return self._stats.get_stats(_require_user_id(user_id))

    def ensure_session_complete(self, user_id: int, *, trigger: str) -> date:
        day = today(self._clock)
        self._store.record_session_complete(user_id, day)
        log_event(
            "info",
            "session.completed",
            user_id=user_id,
            event_type="session.completed",
            extra={"trigger": trigger, "day": day.isoformat()},
        )
        return day

    async def _on_timer_complete(self, user_id: int, reason: CompletionReason) -> None:
        self.ensure_session_complete(user_id, trigger=f"timer_{reason}")
        if reason != "expired":
            return
        try:
            await self._notifier.notify(user_id, messages.TIMER_COMPLETE)
        except NotificationError as exc:
            log_event("warning", "notify.failed", user_id=user_id, error_code=exc.code, extra={"error": exc.message})
