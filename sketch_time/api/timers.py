from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from sketch_time.api.dependencies import get_sessions
from sketch_time.features.sessions.service import SessionService

router = APIRouter()


class StartTimerRequest(BaseModel):
    user_id: int
    duration: int


class CancelTimerRequest(BaseModel):
    user_id: int


@router.post("/start-timer")
async def start_timer(body: StartTimerRequest, sessions: SessionService = Depends(get_sessions)):
    """Start (or restart) the caller's countdown. Times are epoch milliseconds."""
    snapshot = await sessions.start_timer(body.user_id, body.duration)
    return {
        "success": True,
        "start_time": snapshot.start_time_ms,
        "end_time": snapshot.end_time_ms,
        "duration": snapshot.duration_minutes,
    }


@router.get("/timer/{user_id}")
async def get_timer(user_id: int, sessions: SessionService = Depends(get_sessions)):
    snapshot = sessions.get_timer(user_id)
    if snapshot is None:
        return {"has_active_timer": False}
    return snapshot.to_dict()


@router.post("/cancel-timer")
async def cancel_timer(body: CancelTimerRequest, sessions: SessionService = Depends(get_sessions)):
    cancelled = await sessions.cancel_timer(body.user_id)
    return {"success": True, "cancelled": cancelled}
