"""FastAPI application for the Workout Tracker."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import active_session, sessions, stats, templates
from .config import get_settings
from .utils.log_sanitizer import install_log_sanitizer

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
install_log_sanitizer()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting Workout Tracker v{__version__}")
    logger.info(f"Database: {settings.database_path}")
    yield
    logger.info("Shutting down Workout Tracker")


app = FastAPI(
    title="Workout Tracker API",
    description="Workout templates, sessions, personal records and achievements",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(templates.router, prefix="/api/v1/templates", tags=["templates"])
app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["sessions"])
app.include_router(active_session.router, prefix="/api/v1/active-session", tags=["active-session"])
app.include_router(stats.router, prefix="/api/v1/stats", tags=["stats"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Workout Tracker API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
