"""
Match Analytics - FastAPI Application

Main entry point for the backend API.
This module configures the FastAPI app, middleware, and routes.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from match_analytics import __version__
from match_analytics.api.dependencies import ServiceContainer, build_container
from match_analytics.api.routes import matches, predictions
from match_analytics.application.dtos.dtos import HealthResponseDTO, ErrorResponseDTO
from match_analytics.config import Settings
from match_analytics.utils.time_utils import get_current_time


class UTCTimeFormatter(logging.Formatter):
    """Formats log timestamps in the service time zone."""

    def formatTime(self, record, datefmt=None):
        ct = get_current_time()
        if datefmt:
            return ct.strftime(datefmt)
        t = ct.strftime("%Y-%m-%d %H:%M:%S")
        return "%s,%03d" % (t, record.msecs)


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Repeated app creation must not duplicate output
    if any(isinstance(h.formatter, UTCTimeFormatter) for h in root_logger.handlers):
        return
    formatter = UTCTimeFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


logger = logging.getLogger(__name__)


# Application metadata
APP_TITLE = "Match Analytics"
APP_DESCRIPTION = """
**Football Match Analytics API**

Historical match search, team statistics and baseline match predictions.

## Predictions Include

- Home Win / Draw / Away Win probabilities
- Both teams to score probability
- Over 2.5 goals probability
- Confidence score
- Key factors

Predictions come from the remote prediction service when it has one for
the pairing, otherwise from the local Poisson baseline engine.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {APP_TITLE} v{__version__}")

    container: Optional[ServiceContainer] = getattr(app.state, "container", None)
    if container is None:
        container = build_container(app.state.settings)
        app.state.container = container

    if container.repository.is_configured:
        logger.info("✓ Match database configured")
    else:
        logger.warning("⚠ DATABASE_URL not set, serving offline fixtures")

    if container.remote_client.is_configured:
        logger.info("✓ Remote prediction service configured")
    else:
        logger.warning("⚠ Remote prediction service not configured (optional)")

    container.start()
    logger.info("✓ Background processor and cache sweep started")

    yield

    # Shutdown
    logger.info("Shutting down...")
    container.shutdown()
    logger.info("✓ Shutdown complete")


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Runtime settings, read from the environment when omitted
        container: Prebuilt services, built from settings at startup when omitted
    """
    settings = settings or (container.settings if container else Settings.from_env())
    configure_logging(settings.log_level)

    app = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponseDTO(
                error="internal_server_error",
                message="An unexpected error occurred",
                details={"path": str(request.url)},
            ).model_dump(),
        )

    @app.get(
        "/health",
        response_model=HealthResponseDTO,
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and the background processor is accepting work.",
    )
    async def health_check(request: Request) -> HealthResponseDTO:
        container = getattr(request.app.state, "container", None)
        return HealthResponseDTO(
            status="healthy",
            version=__version__,
            timestamp=get_current_time(),
            worker_running=bool(container and container.processor.is_running),
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="API Information",
        description="Get basic API information and links.",
    )
    async def root():
        return {
            "name": APP_TITLE,
            "version": __version__,
            "documentation": "/docs",
            "health": "/health",
            "endpoints": {
                "matches": "/api/v1/matches",
                "predictions": "/api/v1/predictions",
            },
        }

    app.include_router(matches.router, prefix="/api/v1")
    app.include_router(predictions.router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "match_analytics.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
    )
