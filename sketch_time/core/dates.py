"""Day-level date helpers.

Every "day" in the service is a calendar day on a single fixed UTC boundary.
There is no per-user timezone handling.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_day(moment: Union[date, datetime]) -> date:
    """Normalize a datetime (or date) to its UTC calendar day."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc).date()
    return moment


def today(clock: Optional[Clock] = None) -> date:
    return to_day((clock or utc_now)())


def day_difference(a: date, b: date) -> int:
    """Whole calendar days from ``b`` to ``a`` (negative when ``a`` is earlier).

    Computed on ordinal day numbers, so DST or leap seconds never shift it.
    """
    return to_day(a).toordinal() - to_day(b).toordinal()


def is_today(day: date, reference_today: date) -> bool:
    return day_difference(day, reference_today) == 0


def is_yesterday(day: date, reference_today: date) -> bool:
    return day_difference(reference_today, day) == 1


def epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
