"""
sketch_time/features/uploads/store.py

Upload and completed-session storage.

The core only needs distinct upload days, counts, a bounded per-day history
and an idempotent "session complete" upsert. In-memory by default; the
SQLAlchemy store is used when DATABASE_URL is configured.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import Counter
from datetime import date, datetime
from typing import Dict, List, Optional, Protocol

from sketch_time.core.dates import Clock, today, utc_now
from sketch_time.core.errors import ValidationError
from sketch_time.models.upload import DayCount, UploadMetadata, UploadRecord

logger = logging.getLogger("sketch_time")


class UploadStore(Protocol):
    def list_distinct_upload_days(self, user_id: int) -> List[date]:
        """Distinct upload days, most recent first."""

    def count_uploads(self, user_id: int) -> int:
        ...

    def recent_upload_counts(self, user_id: int, limit: int) -> List[DayCount]:
        """Per-day upload counts, most recent day first, at most ``limit`` rows."""

    def record_upload(self, user_id: int, metadata: UploadMetadata) -> UploadRecord:
        ...

    def record_session_complete(self, user_id: int, day: date) -> None:
        """Idempotent upsert keyed by (user_id, day)."""

    def has_upload_today(self, user_id: int) -> bool:
        ...

    def list_completed_sessions(self, user_id: int) -> List[date]:
        ...

    def clear(self) -> None:
        ...


def check_upload_metadata(metadata: UploadMetadata) -> None:
    if not metadata.media_ref or not metadata.media_ref.strip():
        raise ValidationError("media_ref is required")


class InMemoryUploadStore:
    """
    Process-local store with the same semantics as the SQL store.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utc_now
        self._uploads: Dict[int, List[UploadRecord]] = {}
        # (user_id, day) -> completed_at
        self._sessions: Dict[tuple, datetime] = {}
        self._lock = threading.Lock()

    def list_distinct_upload_days(self, user_id: int) -> List[date]:
        with self._lock:
            days = {record.upload_date for record in self._uploads.get(user_id, [])}
        return sorted(days, reverse=True)

    def count_uploads(self, user_id: int) -> int:
        with self._lock:
            return len(self._uploads.get(user_id, []))

    def recent_upload_counts(self, user_id: int, limit: int) -> List[DayCount]:
        with self._lock:
            counts = Counter(record.upload_date for record in self._uploads.get(user_id, []))
        ordered = sorted(counts.items(), key=lambda item: item[0], reverse=True)
        return [DayCount(day=day, count=count) for day, count in ordered[:limit]]

    def record_upload(self, user_id: int, metadata: UploadMetadata) -> UploadRecord:
        check_upload_metadata(metadata)
        record = UploadRecord(
            user_id=user_id,
            display_name=metadata.display_name,
            media_ref=metadata.media_ref,
            upload_date=today(self._clock),
        )
        with self._lock:
            self._uploads.setdefault(user_id, []).append(record)
        return record

    def record_session_complete(self, user_id: int, day: date) -> None:
        with self._lock:
            self._sessions[(user_id, day)] = self._clock()

    def has_upload_today(self, user_id: int) -> bool:
        current = today(self._clock)
        with self._lock:
            return any(record.upload_date == current for record in self._uploads.get(user_id, []))

    def list_completed_sessions(self, user_id: int) -> List[date]:
        with self._lock:
            days = [day for (uid, day) in self._sessions if uid == user_id]
        return sorted(days, reverse=True)

    def clear(self) -> None:
        """FOR TESTING ONLY."""
        with self._lock:
            self._uploads.clear()
            self._sessions.clear()


def get_upload_store(clock: Optional[Clock] = None) -> UploadStore:
    """
    Pick the store implementation.

    - SQL store if DATABASE_URL is configured and reachable
    - In-memory otherwise
    """
    database_url = os.getenv("TEST_DATABASE_URL") or os.getenv("DATABASE_URL")

    if database_url:
        try:
            from sketch_time.core.database import check_connection, create_all_tables, init_engine
            from sketch_time.features.uploads.store_sql import SqlUploadStore

            engine = init_engine(database_url)
            if check_connection():
                create_all_tables()
                return SqlUploadStore(engine, clock=clock)
            logger.warning("[store] database unavailable, falling back to in-memory")
        except Exception:
            logger.warning("[store] failed to initialize SQL store, falling back to in-memory", exc_info=True)

    return InMemoryUploadStore(clock=clock)
