"""FastAPI app factory.

Routes are thin: all push handling lives in `github_jenkins_bridge.bridge`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from github_jenkins_bridge import __version__
from github_jenkins_bridge.bridge.handler import build_push_handler
from github_jenkins_bridge.server.config import ServerSettings
from github_jenkins_bridge.server.webhook import PushHandler, build_webhook_router

logger = logging.getLogger(__name__)


def create_app(
    settings: ServerSettings | None = None,
    handler: PushHandler | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()
    if handler is None:
        handler = build_push_handler(settings).handle

    app = FastAPI(
        title="GitHub Jenkins Bridge",
        version=__version__,
        description="Turns GitHub push webhooks into Jenkins pipeline builds.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
    )
    app.state.settings = settings

    if not settings.webhook_secret:
        logger.warning("GITHUB_WEBHOOK_SECRET is empty; webhook signatures are not verified")

    @app.get("/api/v1/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    app.include_router(build_webhook_router(secret=settings.webhook_secret, handler=handler))
    return app
