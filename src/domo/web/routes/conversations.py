"""Register conversations started for a demo."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from domo.conversation.registry import link_conversation
from domo.web.deps import get_config, get_db, get_repo

router = APIRouter()


class ConversationLink(BaseModel):
    conversation_id: Optional[str] = None
    conversation_name: Optional[str] = None


@router.post("/api/demos/{demo_id}/conversations")
async def start_conversation(request: Request, demo_id: str, payload: ConversationLink):
    """Record the vendor conversation the embed just started for this demo."""
    if not payload.conversation_id:
        return JSONResponse({"error": "conversation_id is required"}, status_code=400)

    # Raises NotFoundError -> 404, ConflictError -> 409
    with get_db(get_config(request)) as db:
        detail = link_conversation(
            get_repo(db), demo_id, payload.conversation_id, payload.conversation_name
        )

    return JSONResponse({"success": True, "conversation": asdict(detail)}, status_code=201)
