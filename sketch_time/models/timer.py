from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Optional

# "expired": the one-shot trigger fired; "cancelled": user stopped early
CompletionReason = Literal["expired", "cancelled"]

CompletionCallback = Callable[[int, CompletionReason], Awaitable[None]]

MS_PER_MINUTE = 60_000


@dataclass(eq=False)
class TimerState:
    """
    Live countdown for one user. Identity matters: a trigger only acts on
    the exact state object it was scheduled for.
    """

    user_id: int
    duration_minutes: int
    start_time_ms: int
    end_time_ms: int
    on_complete: Optional[CompletionCallback] = None
    handle: Optional[asyncio.Task] = field(default=None, repr=False)

    def remaining_ms(self, now_ms: int) -> int:
        return max(0, self.end_time_ms - now_ms)


@dataclass(frozen=True)
class TimerSnapshot:
    user_id: int
    duration_minutes: int
    start_time_ms: int
    end_time_ms: int
    remaining_ms: int

    @property
    def is_expired(self) -> bool:
        return self.remaining_ms == 0

    def to_dict(self) -> dict:
        return {
            "has_active_timer": True,
            "duration": self.duration_minutes,
            "start_time": self.start_time_ms,
            "end_time": self.end_time_ms,
            "remaining_ms": self.remaining_ms,
            "is_expired": self.is_expired,
        }
