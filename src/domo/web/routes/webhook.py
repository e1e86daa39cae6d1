"""Vendor webhook endpoint."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from domo.web.deps import get_config, get_db, get_repo
from domo.webhook.dispatcher import dispatch_event
from domo.webhook.security import verify_webhook

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/tavus-webhook")
async def tavus_webhook(request: Request):
    """Receive a conversation event and record what it tells us."""
    config = get_config(request)
    raw_body = await request.body()

    # Raises WebhookAuthError -> 401
    verify_webhook(request.headers, raw_body, config.webhook_secret)

    try:
        event = json.loads(raw_body)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(event, dict):
        return JSONResponse({"error": "Event must be a JSON object"}, status_code=400)

    try:
        with get_db(config) as db:
            body = dispatch_event(get_repo(db), event, raw_body)
    except Exception as e:
        logger.exception("Tavus webhook error")
        return JSONResponse({"error": str(e)}, status_code=500)

    return JSONResponse(body)
