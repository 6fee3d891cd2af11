"""Fango API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FangoError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and RecommendationRuntime initialized on startup via lifespan,
      runtime stopped and engine disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Runtime lives on app.state; routes reach it through get_runtime
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fango.api.error_handlers import register_error_handlers
from fango.api.routes import health, projects, rounds
from fango.config import get_settings
from fango.infrastructure import database
from fango.infrastructure.observability import setup_logging
from fango.infrastructure.runtime import RecommendationRuntime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    runtime = RecommendationRuntime(settings)
    await runtime.start()
    app.state.runtime = runtime
    logger.info("Fango API started")
    yield
    logger.info("Fango API shutting down")
    await runtime.stop()
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="Fango API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(projects.router)
app.include_router(rounds.router)

register_error_handlers(app)
