"""FastAPI server for the rendered status pages."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from uptimer import __version__
from uptimer.api.routes import page_router
from uptimer.config import Settings
from uptimer.health.scheduler import StatusScheduler

logger = logging.getLogger(__name__)


def create_app(settings: Settings, scheduler: StatusScheduler | None = None) -> FastAPI:
    """Build the app. The scheduler is only read, for the /status page."""
    app = FastAPI(
        title="uptimer",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.scheduler = scheduler

    app.include_router(page_router)

    return app
