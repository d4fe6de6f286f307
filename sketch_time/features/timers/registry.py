"""
sketch_time/features/timers/registry.py
In-memory countdown timers, one per user.

Each live timer owns a one-shot asyncio task that sleeps for the duration
and then expires the timer. All mutations for a user go through that user's
lock, and a trigger only acts on the exact TimerState it was scheduled for,
so a retracted or superseded trigger can never complete a session.

State is not durable: a restart drops every running timer.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Dict, Optional

from sketch_time.core.dates import Clock, epoch_ms, utc_now
from sketch_time.core.logging import log_event
from sketch_time.models.timer import (
    MS_PER_MINUTE,
    CompletionCallback,
    TimerSnapshot,
    TimerState,
)

Sleep = Callable[[float], Awaitable[None]]


class TimerRegistry:
    """
    Authoritative countdown state keyed by user id.

    Owned by the application: built at startup, torn down with shutdown().
    """

    def __init__(self, *, clock: Optional[Clock] = None, sleep: Optional[Sleep] = None):
        self._clock = clock or utc_now
        self._sleep = sleep or asyncio.sleep
        self._timers: Dict[int, TimerState] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Dict[int, int] = {}

    @asynccontextmanager
    async def _user_lock(self, user_id: int):
        """
        Hold the user's lock for the duration of the block.

        Locks are reference counted and dropped once no coroutine holds or
        waits on them, so the map only contains users with work in flight.
        """
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[user_id] - 1
            if remaining:
                self._lock_users[user_id] = remaining
            else:
                del self._lock_users[user_id]
                del self._locks[user_id]

    def lock_count(self) -> int:
        return len(self._locks)

    def _now_ms(self) -> int:
        return epoch_ms(self._clock())

    async def start(
        self,
        user_id: int,
        duration_minutes: int,
        on_complete: Optional[CompletionCallback] = None,
    ) -> TimerSnapshot:
        """
        Start (or restart) the user's timer.

        A running timer is retracted before the new one is installed, so at
        most one trigger per user is ever pending.
        """
        async with self._user_lock(user_id):
            previous = self._timers.pop(user_id, None)
            if previous is not None:
                self._retract(previous)
                log_event("info", "timer.replaced", user_id=user_id, event_type="timer.replaced")

            start_ms = self._now_ms()
            state = TimerState(
                user_id=user_id,
                duration_minutes=duration_minutes,
                start_time_ms=start_ms,
                end_time_ms=start_ms + duration_minutes * MS_PER_MINUTE,
                on_complete=on_complete,
            )
            state.handle = asyncio.get_running_loop().create_task(
                self._run(state), name=f"sketch-timer-{user_id}"
            )
            self._timers[user_id] = state

        log_event(
            "info",
            "timer.started",
            user_id=user_id,
            event_type="timer.started",
            extra={"duration_minutes": duration_minutes, "end_time": state.end_time_ms},
        )
        return self._snapshot(state, start_ms)

    def query(self, user_id: int) -> Optional[TimerSnapshot]:
        """Read-only view. Observing an elapsed timer never completes it."""
        state = self._timers.get(user_id)
        if state is None:
            return None
        return self._snapshot(state, self._now_ms())

    async def cancel(self, user_id: int, *, complete: bool = True) -> bool:
        """
        Retract and remove the user's timer.

        With ``complete`` the completion callback runs with reason
        "cancelled" and its errors reach the caller. Returns False when no
        timer was running.
        """
        async with self._user_lock(user_id):
            state = self._timers.pop(user_id, None)
            if state is None:
                return False
            self._retract(state)

        event = "timer.cancelled" if complete else "timer.discarded"
        log_event("info", event, user_id=user_id, event_type=event)
        if complete and state.on_complete is not None:
            await state.on_complete(user_id, "cancelled")
        return True

    async def discard(self, user_id: int) -> bool:
        """Retract without completing; used when an upload already completed the day."""
        return await self.cancel(user_id, complete=False)

    def active_count(self) -> int:
        return len(self._timers)

    async def shutdown(self) -> None:
        """Cancel every pending trigger without completing any session."""
        states = list(self._timers.values())
        self._timers.clear()
        handles = [state.handle for state in states if state.handle is not None]
        for handle in handles:
            handle.cancel()
        if handles:
            await asyncio.gather(*handles, return_exceptions=True)
        if states:
            log_event("info", "timer.shutdown", event_type="timer.shutdown", extra={"dropped": len(states)})

    async def _run(self, state: TimerState) -> None:
        await self._sleep(state.duration_minutes * 60)

        async with self._user_lock(state.user_id):
            # Superseded or cancelled while we were waking up
            if self._timers.get(state.user_id) is not state:
                return
            del self._timers[state.user_id]

        log_event("info", "timer.expired", user_id=state.user_id, event_type="timer.expired")
        await self._expire(state)

    async def _expire(self, state: TimerState) -> None:
        if state.on_complete is None:
            return
        try:
            await state.on_complete(state.user_id, "expired")
        except Exception:
            # Nobody awaits an expiry; the timer is already gone
            log_event(
                "error",
                "timer.completion_failed",
                user_id=state.user_id,
                event_type="timer.completion_failed",
                exc_info=True,
            )

    @staticmethod
    def _retract(state: TimerState) -> None:
        handle = state.handle
        if handle is not None and not handle.done() and handle is not asyncio.current_task():
            handle.cancel()

    @staticmethod
    def _snapshot(state: TimerState, now_ms: int) -> TimerSnapshot:
        return TimerSnapshot(
            user_id=state.user_id,
            duration_minutes=state.duration_minutes,
            start_time_ms=state.start_time_ms,
            end_time_ms=state.end_time_ms,
            remaining_ms=state.remaining_ms(now_ms),
        )
