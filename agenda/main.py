"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from agenda import __version__
from agenda.api.v1 import auth as auth_routes
from agenda.api.v1.router import router as v1_router
from agenda.core.config import get_settings
from agenda.core.logging import setup_logging
from agenda.core.middleware import RequestLoggingMiddleware

STATIC_DIR = Path(__file__).parent / "static"

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    logger.info(f"Starting Agenda Assistant API (utc_offset={settings.utc_offset}, model={settings.llm_model})...")
    if not settings.google_oauth_configured:
        logger.warning("Google OAuth is not configured; calendar connection is disabled")
    yield
    logger.info("Shutting down Agenda Assistant API...")


app = FastAPI(
    title="Agenda Assistant API",
    description="Chat assistant that turns natural-language messages into Google Calendar events",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

# Added last so it wraps the logging middleware and the session is visible there
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.backend_url.startswith("https://"),
)

app.include_router(auth_routes.router)
app.include_router(v1_router)


@app.get("/healthz")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Chat page; mounted last so API routes take precedence
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
