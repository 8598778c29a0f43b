"""FastAPI application factory."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from kapture.api.routes import destinations, entries, suggestions, sync as sync_routes
from kapture.app import Services, build_services
from kapture.scheduler.jobs import build_scheduler

logger = logging.getLogger(__name__)


def create_app(
    services: Optional[Services] = None, start_scheduler: bool = True
) -> FastAPI:
    """Build and return the FastAPI app.

    Services are built on startup unless supplied (tests pass their own).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.services = services or build_services()
        scheduler = None
        if start_scheduler:
            scheduler = build_scheduler(app.state.services.sync_engine)
            scheduler.start()
            logger.info("Dispatch scheduler started")
        yield
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        await app.state.services.sync_engine.wait_idle()

    app = FastAPI(
        title="Kapture API",
        description="Offline-first capture queue for Notion databases",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(entries.router, prefix="/entries", tags=["entries"])
    app.include_router(sync_routes.router, prefix="/sync", tags=["sync"])
    app.include_router(destinations.router, prefix="/destinations", tags=["destinations"])
    app.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])

    return app


# Module-level app instance for uvicorn
app = create_app()
