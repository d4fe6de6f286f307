from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from sketch_time.models.upload import DayCount


@dataclass(frozen=True)
class StreakResult:
    """Derived from the full distinct-day history; never persisted."""

    current_streak: int = 0
    longest_streak: int = 0
    has_uploaded_today: bool = False


@dataclass(frozen=True)
class UserStats:
    current_streak: int
    longest_streak: int
    total_uploads: int
    has_uploaded_today: bool
    recent_history: List[DayCount] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_uploads": self.total_uploads,
            "has_uploaded_today": self.has_uploaded_today,
            "recent_history": [
                {"date": entry.day.isoformat(), "count": entry.count}
                for entry in self.recent_history
            ],
        }
