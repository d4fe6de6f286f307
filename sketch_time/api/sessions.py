from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from sketch_time.api.dependencies import get_sessions
from sketch_time.features.bot import messages
from sketch_time.features.sessions.service import SessionService
from sketch_time.models.upload import UploadMetadata

router = APIRouter()


class UploadRequest(BaseModel):
    user_id: int
    media_ref: str = Field(..., min_length=1)
    display_name: Optional[str] = None


class DoneRequest(BaseModel):
    user_id: int


@router.get("/stats/{user_id}")
def get_stats(user_id: int, sessions: SessionService = Depends(get_sessions)):
    return sessions.get_stats(user_id).to_dict()


@router.post("/upload")
async def upload_sketch(body: UploadRequest, sessions: SessionService = Depends(get_sessions)):
    """Record an upload; this alone completes today's session and stops any running timer."""
    stats = await sessions.record_upload_and_complete(
        body.user_id,
        UploadMetadata(media_ref=body.media_ref, display_name=body.display_name),
    )
    return {"success": True, "message": messages.SKETCH_SAVED, "stats": stats.to_dict()}


@router.post("/done")
async def mark_done(body: DoneRequest, sessions: SessionService = Depends(get_sessions)):
    stats = await sessions.mark_done(body.user_id)
    return {"success": True, "message": messages.SESSION_DONE, "stats": stats.to_dict()}
