"""
sketch_time/features/uploads/store_sql.py

SQLAlchemy-backed upload store.

Maintains identical semantics to InMemoryUploadStore. Every call runs in its
own transaction; there is no cross-call transaction between "save upload"
and "mark session complete".
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import and_, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from sketch_time.core.database import get_db_session, sessions, uploads
from sketch_time.core.dates import Clock, today, utc_now
from sketch_time.core.errors import StorageError
from sketch_time.features.uploads.store import check_upload_metadata
from sketch_time.models.upload import DayCount, UploadMetadata, UploadRecord

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlUploadStore:
    """
    SQL upload store.

    Uses SQLAlchemy Core against the ``uploads`` and ``sessions`` tables.
    """

    def __init__(self, engine: Engine, clock: Optional[Clock] = None):
        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self._clock = clock or utc_now

    def _session(self):
        return get_db_session(self._session_factory)

    def list_distinct_upload_days(self, user_id: int) -> List[date]:
        query = (
            select(uploads.c.upload_date)
            .where(uploads.c.user_id == user_id)
            .distinct()
            .order_by(uploads.c.upload_date.desc())
        )
        try:
            with self._session() as session:
                return [row.upload_date for row in session.execute(query)]
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read upload days") from exc

    def count_uploads(self, user_id: int) -> int:
        query = select(func.count()).select_from(uploads).where(uploads.c.user_id == user_id)
        try:
            with self._session() as session:
                return int(session.execute(query).scalar_one())
        except SQLAlchemyError as exc:
            raise StorageError("Failed to count uploads") from exc

    def recent_upload_counts(self, user_id: int, limit: int) -> List[DayCount]:
        query = (
            select(uploads.c.upload_date, func.count().label("sketches"))
            .where(uploads.c.user_id == user_id)
            .group_by(uploads.c.upload_date)
            .order_by(uploads.c.upload_date.desc())
            .limit(limit)
        )
        try:
            with self._session() as session:
                return [DayCount(day=row.upload_date, count=int(row.sketches)) for row in session.execute(query)]
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read upload history") from exc

    def record_upload(self, user_id: int, metadata: UploadMetadata) -> UploadRecord:
        check_upload_metadata(metadata)
        record = UploadRecord(
            user_id=user_id,
            display_name=metadata.display_name,
            media_ref=metadata.media_ref,
            upload_date=today(self._clock),
        )
        stmt = insert(uploads).values(
            user_id=record.user_id,
            display_name=record.display_name,
            media_ref=record.media_ref,
            upload_date=record.upload_date,
            created_at=self._clock(),
        )
        try:
            with self._session() as session:
                session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to save upload") from exc
        return record

    def record_session_complete(self, user_id: int, day: date) -> None:
        completed_at = self._clock()
        try:
            with self._session() as session:
                dialect_insert = _UPSERT_DIALECTS.get(self._engine.dialect.name)
                if dialect_insert is not None:
                    stmt = dialect_insert(sessions).values(
                        user_id=user_id, session_date=day, completed_at=completed_at
                    )
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[sessions.c.user_id, sessions.c.session_date],
                        set_={"completed_at": completed_at},
                    )
                    session.execute(stmt)
                    return

                match = and_(sessions.c.user_id == user_id, sessions.c.session_date == day)
                result = session.execute(update(sessions).where(match).values(completed_at=completed_at))
                if result.rowcount == 0:
                    session.execute(
                        insert(sessions).values(user_id=user_id, session_date=day, completed_at=completed_at)
                    )
        except SQLAlchemyError as exc:
            raise StorageError("Failed to mark session complete") from exc

    def has_upload_today(self, user_id: int) -> bool:
        query = (
            select(func.count())
            .select_from(uploads)
            .where(and_(uploads.c.user_id == user_id, uploads.c.upload_date == today(self._clock)))
        )
        try:
            with self._session() as session:
                return int(session.execute(query).scalar_one()) > 0
        except SQLAlchemyError as exc:
            raise StorageError("Failed to check today's upload") from exc

    def list_completed_sessions(self, user_id: int) -> List[date]:
        query = (
            select(sessions.c.session_date)
            .where(sessions.c.user_id == user_id)
            .order_by(sessions.c.session_date.desc())
        )
        try:
            with self._session() as session:
                return [row.session_date for row in session.execute(query)]
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read sessions") from exc

    def clear(self) -> None:
        """FOR TESTING ONLY."""
        with self._session() as session:
            session.execute(sessions.delete())
            session.execute(uploads.delete())
