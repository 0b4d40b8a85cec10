from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_log_level, get_upload_settings, get_visit_metrics_settings
from app.logging_utils import configure_logging, log_event


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Log the effective targets on boot."""
    settings = get_visit_metrics_settings()
    log_event(
        logging.getLogger(__name__),
        logging.INFO,
        "visit_metrics_api_started",
        total_target=settings.total_target,
        total_area_target=settings.total_area_target,
        max_upload_bytes=get_upload_settings().max_upload_bytes,
    )
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging(get_log_level())

    application = FastAPI(
        title="Visit Metrics API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import metrics_router

    application.include_router(metrics_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
