"""Dashboard and health routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from domo import __version__
from domo.web.app import templates
from domo.web.deps import get_config, get_db, get_repo

router = APIRouter()


@router.get("/favicon.ico")
async def favicon():
    """Return empty response for favicon requests."""
    return Response(status_code=204)


@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@router.get("/")
async def index(request: Request):
    """List demos with links to their reporting pages."""
    with get_db(get_config(request)) as db:
        repo = get_repo(db)
        demos = [
            {"demo": d, "videos": len(repo.list_demo_videos(d.id)),
             "conversations": len(repo.list_conversations(d.id))}
            for d in repo.list_demos()
        ]

    return templates.TemplateResponse(request, "pages/dashboard.html", {
        "demos": demos,
        "active_page": "dashboard",
    })
