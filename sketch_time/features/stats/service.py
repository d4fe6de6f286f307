from __future__ import annotations

from typing import Optional

from sketch_time.core.dates import Clock
from sketch_time.features.streaks.calculator import calculate_streaks
from sketch_time.features.uploads.store import UploadStore
from sketch_time.models.streak import UserStats

DEFAULT_HISTORY_LIMIT = 30


class StatsAggregator:
    """Read model over the upload store. Streaks are recomputed on every call."""

    def __init__(self, store: UploadStore, *, history_limit: int = DEFAULT_HISTORY_LIMIT, clock: Optional[Clock] = None):
        self._store = store
        self._history_limit = history_limit
        self._clock = clock

    def get_stats(self, user_id: int) -> UserStats:
        streaks = calculate_streaks(self._store.list_distinct_upload_days(user_id), clock=self._clock)
        return UserStats(
            current_streak=streaks.current_streak,
            longest_streak=streaks.longest_streak,
            total_uploads=self._store.count_uploads(user_id),
            has_uploaded_today=streaks.has_uploaded_today,
            recent_history=self._store.recent_upload_counts(user_id, self._history_limit),
        )
