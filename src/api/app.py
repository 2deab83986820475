"""
FastAPI application for scrape jobs.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from src.core.config import Config, get_config
from src.core.logging import get_logger
from src.sessions.jobs import JobRunner
from src.sessions.tracker import SessionTracker

logger = get_logger(__name__)


def create_app(config: Optional[Config] = None, runner: Optional[JobRunner] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration (default: global config)
        runner: Job runner to serve (default: one backed by a fresh tracker)
    """
    config = config or get_config()
    runner = runner or JobRunner(SessionTracker(ttl_seconds=config.session_ttl_seconds), config=config)

    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        logger.info("Scrape API started")
        try:
            yield
        finally:
            await runner.shutdown()
            logger.info("Scrape API stopped; running jobs cancelled")

    application = FastAPI(
        title="Maps List Scraper API",
        version="0.1.0",
        lifespan=_lifespan,
    )
    application.state.runner = runner

    from src.api.routes import router
    application.include_router(router)

    @application.get("/health")
    async def healthcheck() -> dict:
        return {"status": "ok", "sessions": len(runner.tracker)}

    return application
