"""FastAPI application factory for the Domo web service."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from domo.config import DomoConfig, load_config
from domo.errors import ConflictError, NotFoundError, WebhookAuthError
from domo.logging_setup import setup_logging

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).parent
TEMPLATES_DIR = WEB_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def create_app(config: DomoConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_config()
    config.ensure_dirs()
    setup_logging(config.log_level)
    templates.env.globals["site_name"] = config.site_name

    app = FastAPI(title=config.site_name, docs_url=None, redoc_url=None)
    app.state.config = config

    if not config.requires_webhook_auth:
        logger.warning("DOMO_WEBHOOK_SECRET is not set; webhook deliveries are not authenticated")

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse({"error": str(exc)}, status_code=404)

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return JSONResponse({"error": str(exc)}, status_code=409)

    @app.exception_handler(WebhookAuthError)
    async def unauthorized(request: Request, exc: WebhookAuthError):
        logger.warning(f"Rejected webhook from {request.client.host if request.client else '?'}: {exc}")
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    # Register all routes
    from domo.web.routes import register_routes

    register_routes(app)

    return app
