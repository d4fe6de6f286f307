"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults
- Table definitions for uploads and completed sessions
"""
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, MetaData, Table, Column, Integer, BigInteger, String, Date, DateTime, Index, UniqueConstraint, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.sql import func

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Process-wide engine, set by init_engine
_engine: Optional[Engine] = None


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        pool_pre_ping=True,
        echo=False,  # Set to True for SQL query logging
    )


def init_engine(database_url: str) -> Engine:
    """Build the process-wide engine for DATABASE_URL."""
    global _engine

    if not database_url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    _engine = build_engine(database_url)
    return _engine


def get_engine() -> Engine:
    """Get the engine built by init_engine."""
    if _engine is None:
        raise RuntimeError("Database engine not initialized; call init_engine first")
    return _engine


@contextmanager
def get_db_session(session_factory):
    """
    Context manager for database sessions.

    Usage:
        with get_db_session(factory) as session:
            session.execute(...)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables(engine: Optional[Engine] = None):
    """
    Create all tables defined in metadata.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    metadata.create_all(engine or get_engine())


def drop_all_tables(engine: Optional[Engine] = None):
    """Drop all tables. FOR TESTING ONLY."""
    metadata.drop_all(engine or get_engine())


def check_connection() -> bool:
    """
    Check if the database connection is working.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


# ============================================================================
# TABLE DEFINITIONS
# ============================================================================

uploads = Table(
    'uploads',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', BigInteger, nullable=False),
    Column('display_name', String(255), nullable=True),
    Column('media_ref', String(512), nullable=False),
    Column('upload_date', Date, nullable=False),
    Column('created_at', DateTime(timezone=True), nullable=False, server_default=func.now()),
    Index('idx_uploads_user_date', 'user_id', 'upload_date'),
)

sessions = Table(
    'sessions',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', BigInteger, nullable=False),
    Column('session_date', Date, nullable=False),
    Column('completed_at', DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint('user_id', 'session_date', name='uq_sessions_user_date'),
)
