"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from social_ranker.api.routes.analysis import router as analysis_router
from social_ranker.api.routes.health import router as health_router
from social_ranker.api.routes.metadata import router as metadata_router
from social_ranker.api.routes.posts import router as posts_router
from social_ranker.core.errors import normalize_unknown_error
from social_ranker.core.logging import EVENT_APP_START, EVENT_CONFIG_LOADED, setup_logging
from social_ranker.core.settings import settings
from social_ranker.db.engine import init_db
from social_ranker.db.migrations import run_migrations

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info(EVENT_APP_START)
    logger.info("%s: %s", EVENT_CONFIG_LOADED, settings.safe_dump())
    init_db()
    run_migrations()
    logger.info("Social Ranker API ready")
    yield
    logger.info("Social Ranker API shutting down")


app = FastAPI(
    title="Social Ranker API",
    version="0.1.0",
    description="Scores and ranks social media posts by engagement.",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler: log details, return a safe generic message."""
    error = normalize_unknown_error(exc, operation=f"{request.method} {request.url.path}")
    return JSONResponse(status_code=error.http_status, content=error.to_response())


app.include_router(health_router, tags=["health"])
app.include_router(analysis_router, tags=["analysis"])
app.include_router(posts_router, tags=["posts"])
app.include_router(metadata_router, tags=["metadata"])
