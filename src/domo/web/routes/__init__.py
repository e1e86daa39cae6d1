"""Route registration for the Domo web service."""

from __future__ import annotations

from fastapi import FastAPI


def register_routes(app: FastAPI):
    """Include all route modules."""
    from domo.web.routes import (
        dashboard,
        conversations,
        reporting,
        tracking,
        video_context,
        webhook,
    )

    app.include_router(webhook.router)
    app.include_router(conversations.router)
    app.include_router(tracking.router)
    app.include_router(video_context.router)
    app.include_router(reporting.router)
    app.include_router(dashboard.router)
