"""CTA click and video view tracking from the embedded demo."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from domo.web.deps import client_ip, get_config, get_db, get_repo
from domo.webhook.handlers import record_cta_click, record_video_view

logger = logging.getLogger(__name__)

router = APIRouter()


class CtaClick(BaseModel):
    conversation_id: Optional[str] = None
    demo_id: Optional[str] = None
    cta_url: Optional[str] = None


class VideoView(BaseModel):
    conversation_id: Optional[str] = None
    demo_id: Optional[str] = None
    video_title: Optional[str] = None


@router.post("/api/track-cta-click")
async def track_cta_click(request: Request, payload: CtaClick):
    if not payload.conversation_id or not payload.demo_id:
        return JSONResponse(
            {"error": "Missing required fields: conversation_id and demo_id"},
            status_code=400,
        )

    try:
        with get_db(get_config(request)) as db:
            record_cta_click(
                get_repo(db),
                payload.conversation_id,
                payload.demo_id,
                cta_url=payload.cta_url,
                user_agent=request.headers.get("user-agent", ""),
                ip_address=client_ip(request),
            )
    except Exception as e:
        logger.error(f"Failed to track CTA click for {payload.conversation_id}: {e}")
        return JSONResponse({"error": "Failed to track CTA click"}, status_code=500)

    return {"success": True}


@router.post("/api/track-video-view")
async def track_video_view(request: Request, payload: VideoView):
    if not payload.conversation_id or not payload.video_title:
        return JSONResponse(
            {"error": "Missing required fields: conversation_id and video_title"},
            status_code=400,
        )

    try:
        with get_db(get_config(request)) as db:
            record_video_view(get_repo(db), payload.conversation_id, payload.video_title)
    except Exception as e:
        logger.error(f"Failed to track video view for {payload.conversation_id}: {e}")
        return JSONResponse({"error": "Failed to track video view"}, status_code=500)

    return {"success": True}
