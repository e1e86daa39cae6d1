"""Video context for the agent: where in which video the viewer is."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, FiniteFloat

from domo.errors import NotFoundError
from domo.video.chapters import format_time, parse_chapters_from_context
from domo.video.context import build_video_context, create_video_context_message
from domo.web.deps import get_config, get_db, get_repo

router = APIRouter()


class VideoContextRequest(BaseModel):
    video_title: Optional[str] = None
    timestamp: Optional[FiniteFloat] = None
    is_paused: bool = False
    demo_id: Optional[str] = None
    generated_context: Optional[str] = None


@router.post("/api/video-context")
async def video_context(request: Request, payload: VideoContextRequest):
    """Build the context message for the player state in the request.

    Chapters come from ``generated_context`` when given, otherwise from the
    stored demo video.
    """
    if not payload.video_title:
        return JSONResponse({"error": "video_title is required"}, status_code=400)
    if payload.timestamp is None:
        return JSONResponse({"error": "timestamp is required"}, status_code=400)

    generated_context = payload.generated_context
    if generated_context is None and payload.demo_id:
        with get_db(get_config(request)) as db:
            video = get_repo(db).get_demo_video(payload.demo_id, payload.video_title)
        if video is None:
            raise NotFoundError(f"Video not found: {payload.video_title}")
        generated_context = video.generated_context

    chapters = parse_chapters_from_context(generated_context)
    info = build_video_context(
        payload.video_title, payload.timestamp, payload.is_paused, chapters
    )

    return {
        "success": True,
        "message": create_video_context_message(info),
        "chapters": [
            {
                "title": c.title,
                "start_time": format_time(c.start),
                "end_time": format_time(c.end),
            }
            for c in chapters
        ],
    }
