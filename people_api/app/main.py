"""
Main entrypoint for the People API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``, so it can be served directly::

    uvicorn people_api.app.main:app --reload

On startup the lifespan applies database migrations and creates the
single ``Enricher`` (and its HTTP client) shared by all requests; on
shutdown the client is closed.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .api.middleware import RequestLoggingMiddleware
from .api.v1.endpoints import health
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .services.enrich_service import Enricher
from .services.person_service import PersonService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    app.state.enricher = Enricher()
    logger.info("App is started")
    try:
        yield
    finally:
        await app.state.enricher.aclose()
        await PersonService.close()
        logger.info("shutdown completed")


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        description="Service storing people enriched with age, gender and nationality",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(v1_router, prefix="/api/v1")
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()
