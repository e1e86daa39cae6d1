"""Reporting routes: per-conversation scores and the demo reporting page."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from domo.errors import NotFoundError
from domo.reporting.service import build_demo_report, score_conversation, summarize_reports
from domo.web.app import templates
from domo.web.deps import get_config, get_db, get_repo

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/demos/{demo_id}/conversations/{conversation_id}/score")
async def conversation_score(request: Request, demo_id: str, conversation_id: str):
    with get_db(get_config(request)) as db:
        report = score_conversation(get_repo(db), demo_id, conversation_id)

    data = report.to_dict()["domo_score"]
    data["conversation_id"] = conversation_id
    return data


@router.get("/api/demos/{demo_id}/report")
async def demo_report(request: Request, demo_id: str):
    with get_db(get_config(request)) as db:
        reports = build_demo_report(get_repo(db), demo_id)

    return {
        "demo_id": demo_id,
        "summary": summarize_reports(reports),
        "conversations": [r.to_dict() for r in reports],
    }


@router.get("/demos/{demo_id}/reporting")
async def reporting_page(request: Request, demo_id: str):
    """Conversation list with contact, interest, videos, CTA and score."""
    demo = None
    reports = []
    error = None

    try:
        with get_db(get_config(request)) as db:
            repo = get_repo(db)
            demo = repo.get_demo(demo_id)
            if demo is None:
                raise NotFoundError(f"Unknown demo: {demo_id}")
            reports = build_demo_report(repo, demo_id)
    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to load reporting for demo {demo_id}: {e}")
        error = "Could not load conversations for this demo."

    return templates.TemplateResponse(request, "pages/reporting.html", {
        "demo": demo,
        "reports": reports,
        "summary": summarize_reports(reports),
        "error": error,
        "active_page": "reporting",
    })
