"""SPEX API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SpexError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, logging and upload directory initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - No import-time side effects: the upload directory is created in lifespan,
      StaticFiles mounted with check_dir=False
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from spex.api.dependencies import get_upload_store
from spex.api.error_handlers import register_error_handlers
from spex.api.routes import admin, cards, events, health, uploads
from spex.config import get_settings
from spex.infrastructure import database
from spex.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    get_upload_store().ensure_directory()
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"SPEX API started, public base {settings.base_url}")
    yield
    logger.info("SPEX API shutting down")
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="SPEX API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=list({settings.frontend_base, *settings.cors_origins}),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(cards.router)
app.include_router(events.router)
app.include_router(uploads.router)
app.include_router(admin.router)

register_error_handlers(app)

# Uploaded images, proxied by the frontend under /uploads/*
# Directory is created in lifespan (or by the first upload)
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
