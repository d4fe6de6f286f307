from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class UploadMetadata:
    """What a caller supplies for a new upload. The store stamps the day."""

    media_ref: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class UploadRecord:
    """
    A single stored upload. Day-level, UTC only, immutable once created.
    """

    user_id: int
    display_name: Optional[str]
    media_ref: str
    upload_date: date


@dataclass(frozen=True)
class DayCount:
    day: date
    count: int
