from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from sketch_time.core.dates import Clock, day_difference, is_today, is_yesterday, today
from sketch_time.models.streak import StreakResult


def calculate_streaks(upload_days: Iterable[date], *, clock: Optional[Clock] = None) -> StreakResult:
    """Compute current/longest streaks from a user's upload days.

    Same-day duplicates collapse to one day. The current streak only counts
    when the latest upload is today or yesterday; the longest streak is an
    independent scan and may lie entirely in the past.
    """
    days: List[date] = sorted(set(upload_days), reverse=True)
    if not days:
        return StreakResult(current_streak=0, longest_streak=0, has_uploaded_today=False)

    reference = today(clock)
    has_uploaded_today = reference in days

    current = 0
    latest = days[0]
    if is_today(latest, reference) or is_yesterday(latest, reference):
        current = 1
        for newer, older in zip(days, days[1:]):
            if day_difference(newer, older) != 1:
                break
            current += 1

    longest = 1
    run = 1
    for newer, older in zip(days, days[1:]):
        if day_difference(newer, older) == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    return StreakResult(
        current_streak=current,
        longest_streak=longest,
        has_uploaded_today=has_uploaded_today,
    )
